from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('accounts.urls')),
    path('api/', include('core.urls')),
    path('api/', include('audit.urls')),
    path('api/', include('carriers.urls')),
    path('api/', include('rate_tables.urls')),
    path('api/', include('pricing.urls')),
    path('api/', include('quotes.urls')),
]

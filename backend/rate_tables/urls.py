from django.urls import path

from .views import (
    AdminRateImportView,
    AdminRouteDetailView,
    AdminRouteListView,
    AdminRouteStatusView,
    CarrierRateImportView,
    MyRoutesView,
    RateTemplateView,
)

urlpatterns = [
    path('rate-tables/template/', RateTemplateView.as_view(), name='rate-template'),
    path('rate-tables/import/', CarrierRateImportView.as_view(), name='rate-import'),
    path('rate-tables/routes/', MyRoutesView.as_view(), name='my-routes'),
    path('admin/rate-tables/import/', AdminRateImportView.as_view(), name='admin-rate-import'),
    path('admin/routes/', AdminRouteListView.as_view(), name='admin-routes'),
    path('admin/routes/<int:pk>/', AdminRouteDetailView.as_view(), name='admin-route-detail'),
    path('admin/routes/<int:pk>/status/', AdminRouteStatusView.as_view(), name='admin-route-status'),
]

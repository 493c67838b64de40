from django.urls import path

from .views import AdminSettingDetailView, AdminSettingsView, PublicSettingsView

urlpatterns = [
    path('settings/public/', PublicSettingsView.as_view(), name='settings-public'),
    path('admin/settings/', AdminSettingsView.as_view(), name='settings-admin'),
    path('admin/settings/<str:key>/', AdminSettingDetailView.as_view(), name='settings-admin-detail'),
]

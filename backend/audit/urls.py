from django.urls import path

from .views import (
    AuditExportView,
    AuditLogListView,
    AuditStatsView,
    ComplianceReportView,
    SecurityEventsView,
)

urlpatterns = [
    path('admin/audit/logs/', AuditLogListView.as_view(), name='audit-logs'),
    path('admin/audit/stats/', AuditStatsView.as_view(), name='audit-stats'),
    path('admin/audit/compliance/', ComplianceReportView.as_view(), name='audit-compliance'),
    path('admin/audit/security-events/', SecurityEventsView.as_view(), name='audit-security-events'),
    path('admin/audit/export/', AuditExportView.as_view(), name='audit-export'),
]

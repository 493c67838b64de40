from datetime import datetime, timedelta

from django.http import HttpResponse
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsPlatformAdmin
from .logger import AuditLogger, request_context
from .models import AuditLog
from .reports import audit_stats, compliance_report, detect_security_events, export_csv
from .serializers import AuditLogSerializer

EXPORT_LIMIT = 10000


class AuditLogPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


def _parse_bound(raw, end_of_day=False):
    """Accepts ISO datetimes or plain dates; returns an aware datetime or None."""
    if not raw:
        return None
    value = parse_datetime(raw)
    if value is None:
        day = parse_date(raw)
        if day is None:
            raise ValueError(f"Data inválida: {raw}")
        value = datetime.combine(day, datetime.max.time() if end_of_day else datetime.min.time())
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def _filtered(params):
    qs = AuditLog.objects.select_related('user')
    if params.get('action'):
        qs = qs.filter(action=params['action'])
    if params.get('resource_type'):
        qs = qs.filter(resource_type=params['resource_type'])
    if params.get('resource_id'):
        qs = qs.filter(resource_id=params['resource_id'])
    if params.get('user'):
        qs = qs.filter(user_id=params['user'])
    start = _parse_bound(params.get('start'))
    end = _parse_bound(params.get('end'), end_of_day=True)
    if start:
        qs = qs.filter(created_at__gte=start)
    if end:
        qs = qs.filter(created_at__lte=end)
    return qs


class AuditLogListView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        try:
            qs = _filtered(request.query_params)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        paginator = AuditLogPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(AuditLogSerializer(page, many=True).data)


class AuditStatsView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        try:
            start = _parse_bound(request.query_params.get('start'))
            end = _parse_bound(request.query_params.get('end'), end_of_day=True)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(audit_stats(start, end))


class ComplianceReportView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        try:
            start = _parse_bound(request.query_params.get('start'))
            end = _parse_bound(request.query_params.get('end'), end_of_day=True)
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        end = end or timezone.now()
        start = start or end - timedelta(days=30)
        if start > end:
            return Response({"detail": "start must be before end"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(compliance_report(start, end))


class SecurityEventsView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        try:
            hours = int(request.query_params.get('hours', 24))
        except ValueError:
            return Response({"detail": "hours must be an integer"}, status=status.HTTP_400_BAD_REQUEST)
        if hours <= 0:
            return Response({"detail": "hours must be positive"}, status=status.HTTP_400_BAD_REQUEST)
        events = detect_security_events(hours)
        return Response({"hours": hours, "count": len(events), "events": events})


class AuditExportView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        try:
            logs = list(_filtered(request.query_params)[:EXPORT_LIMIT])
        except ValueError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        AuditLogger.log_export('audit_logs', len(logs), 'csv', **request_context(request))
        response = HttpResponse(export_csv(logs), content_type='text/csv; charset=utf-8')
        stamp = timezone.localtime().strftime('%Y%m%d-%H%M')
        response['Content-Disposition'] = f'attachment; filename="audit-logs-{stamp}.csv"'
        return response

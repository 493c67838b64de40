"""
Read-side helpers over the audit trail: dashboard stats, compliance report,
suspicious-activity detection and CSV export.
"""
from __future__ import annotations

import csv
import io
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from django.db.models import Count, Q, QuerySet
from django.db.models.functions import ExtractHour
from django.utils import timezone

from .models import AuditLog

logger = logging.getLogger(__name__)

FAILED_LOGIN_HIGH = 5
FAILED_LOGIN_CRITICAL = 10
EXPORT_THRESHOLD = 10
PERMISSION_DENIED_THRESHOLD = 5

CSV_COLUMNS = [
    'created_at', 'user', 'action', 'resource_type', 'resource_id',
    'description', 'ip_address', 'user_agent',
]


def _window(start: Optional[datetime], end: Optional[datetime]) -> QuerySet:
    qs = AuditLog.objects.all()
    if start:
        qs = qs.filter(created_at__gte=start)
    if end:
        qs = qs.filter(created_at__lte=end)
    return qs


def _counts(qs: QuerySet, field: str) -> Dict[str, int]:
    rows = qs.values(field).annotate(n=Count('id')).order_by(field)
    return {row[field]: row['n'] for row in rows}


def audit_stats(start: Optional[datetime] = None, end: Optional[datetime] = None) -> Dict[str, Any]:
    qs = _window(start, end)
    today = timezone.localdate()
    by_hour = (qs.annotate(hour=ExtractHour('created_at'))
                 .values('hour').annotate(n=Count('id')).order_by('hour'))
    return {
        'total_logs': qs.count(),
        'today_logs': qs.filter(created_at__date=today).count(),
        'failed_logins': qs.filter(action=AuditLog.ACTION_LOGIN_FAILED).count(),
        'unique_users': qs.exclude(user__isnull=True).values('user').distinct().count(),
        'by_action': _counts(qs, 'action'),
        'by_resource': _counts(qs, 'resource_type'),
        'by_hour': {row['hour']: row['n'] for row in by_hour},
    }


def compliance_report(start: datetime, end: datetime) -> Dict[str, Any]:
    qs = _window(start, end)
    modifications = qs.filter(action__in=[
        AuditLog.ACTION_CREATE, AuditLog.ACTION_UPDATE, AuditLog.ACTION_DELETE,
    ])
    security = qs.filter(action__in=[
        AuditLog.ACTION_LOGIN_FAILED, AuditLog.ACTION_PERMISSION_DENIED,
    ])
    per_user = (qs.exclude(user__isnull=True)
                  .values('user__username')
                  .annotate(
                      total=Count('id'),
                      modifications=Count('id', filter=Q(action__in=[
                          AuditLog.ACTION_CREATE, AuditLog.ACTION_UPDATE, AuditLog.ACTION_DELETE,
                      ])),
                      exports=Count('id', filter=Q(action=AuditLog.ACTION_EXPORT)),
                  )
                  .order_by('-total'))
    return {
        'period': {'start': start.isoformat(), 'end': end.isoformat()},
        'data_access': {
            'reads': qs.filter(action=AuditLog.ACTION_READ).count(),
            'exports': qs.filter(action=AuditLog.ACTION_EXPORT).count(),
        },
        'modifications': {
            'total': modifications.count(),
            'by_action': _counts(modifications, 'action'),
            'by_resource': _counts(modifications, 'resource_type'),
        },
        'security_events': {
            'failed_logins': security.filter(action=AuditLog.ACTION_LOGIN_FAILED).count(),
            'permission_denied': security.filter(action=AuditLog.ACTION_PERMISSION_DENIED).count(),
        },
        'user_activity': [
            {
                'username': row['user__username'],
                'total': row['total'],
                'modifications': row['modifications'],
                'exports': row['exports'],
            }
            for row in per_user
        ],
    }


def detect_security_events(hours: int = 24) -> List[Dict[str, Any]]:
    """
    Flags brute-force logins, bulk exports and repeated permission denials
    inside the last ``hours``.
    """
    since = timezone.now() - timedelta(hours=hours)
    recent = AuditLog.objects.filter(created_at__gte=since)
    events: List[Dict[str, Any]] = []

    failed: Dict[str, int] = {}
    for metadata in recent.filter(action=AuditLog.ACTION_LOGIN_FAILED).values_list('metadata', flat=True):
        email = (metadata or {}).get('email') or 'desconhecido'
        failed[email] = failed.get(email, 0) + 1
    for email, count in sorted(failed.items()):
        if count >= FAILED_LOGIN_HIGH:
            events.append({
                'type': 'failed_logins',
                'severity': 'critical' if count >= FAILED_LOGIN_CRITICAL else 'high',
                'subject': email,
                'count': count,
                'description': f"{count} tentativas de login falhas para {email}",
            })

    exports = (recent.filter(action=AuditLog.ACTION_EXPORT).exclude(user__isnull=True)
                     .values('user__username').annotate(n=Count('id')))
    for row in exports:
        if row['n'] >= EXPORT_THRESHOLD:
            events.append({
                'type': 'bulk_export',
                'severity': 'medium',
                'subject': row['user__username'],
                'count': row['n'],
                'description': f"{row['n']} exportações por {row['user__username']}",
            })

    denied = (recent.filter(action=AuditLog.ACTION_PERMISSION_DENIED).exclude(user__isnull=True)
                    .values('user__username').annotate(n=Count('id')))
    for row in denied:
        if row['n'] >= PERMISSION_DENIED_THRESHOLD:
            events.append({
                'type': 'permission_denied',
                'severity': 'high',
                'subject': row['user__username'],
                'count': row['n'],
                'description': f"{row['n']} acessos negados para {row['user__username']}",
            })

    if events:
        logger.warning("Detected %d security events in the last %dh", len(events), hours)
    return events


def export_csv(logs: Iterable[AuditLog]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(CSV_COLUMNS)
    for log in logs:
        writer.writerow([
            log.created_at.isoformat(),
            log.user.username if log.user_id else '',
            log.action,
            log.resource_type,
            log.resource_id or '',
            log.description,
            log.ip_address or '',
            log.user_agent or '',
        ])
    return buf.getvalue()

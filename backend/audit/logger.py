"""
Audit trail writer.

Every admin-visible state change (carrier approval, repasse payout, rate-table
import, platform settings) goes through ``AuditLogger``. A failure to write the
audit row is logged and reported as ``False``; it never aborts the action that
triggered it.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from django.core.serializers.json import DjangoJSONEncoder
from django.db import DatabaseError

from .models import AuditLog

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = ('password', 'token', 'secret', 'api_key', 'credit_card')
REDACTED = '***REDACTED***'


def client_ip(request) -> Optional[str]:
    """Best-effort caller IP, honouring the first X-Forwarded-For hop."""
    if request is None:
        return None
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return request.META.get('REMOTE_ADDR') or None


def request_context(request) -> Dict[str, Any]:
    if request is None:
        return {}
    user = getattr(request, 'user', None)
    return {
        'user': user if user is not None and user.is_authenticated else None,
        'ip_address': client_ip(request),
        'user_agent': request.META.get('HTTP_USER_AGENT'),
    }


def _json_safe(data: Any) -> Any:
    # Decimals, dates and UUIDs come back as strings.
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


class AuditLogger:

    @classmethod
    def log(
        cls,
        action: str,
        resource_type: str,
        description: str,
        *,
        user=None,
        resource_id: Any = None,
        metadata: Optional[Dict[str, Any]] = None,
        before_data: Any = None,
        after_data: Any = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> bool:
        try:
            AuditLog.objects.create(
                user=user,
                action=action,
                resource_type=resource_type,
                resource_id=str(resource_id) if resource_id is not None else None,
                description=description,
                metadata=_json_safe(metadata) if metadata is not None else None,
                before_data=_json_safe(cls.sanitize_data(before_data)) if before_data else None,
                after_data=_json_safe(cls.sanitize_data(after_data)) if after_data else None,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except DatabaseError:
            logger.exception("Failed to write audit log %s/%s:%s", action, resource_type, resource_id)
            return False
        return True

    @classmethod
    def log_create(cls, resource_type: str, resource_id: Any, data: Any, description: Optional[str] = None, **ctx) -> bool:
        return cls.log(
            AuditLog.ACTION_CREATE,
            resource_type,
            description or f"{resource_type} criado",
            resource_id=resource_id,
            after_data=data,
            **ctx,
        )

    @classmethod
    def log_update(cls, resource_type: str, resource_id: Any, before: Any, after: Any,
                   description: Optional[str] = None, **ctx) -> bool:
        metadata = dict(ctx.pop('metadata', None) or {})
        metadata['changes'] = cls.changed_fields(before, after)
        return cls.log(
            AuditLog.ACTION_UPDATE,
            resource_type,
            description or f"{resource_type} atualizado",
            resource_id=resource_id,
            before_data=before,
            after_data=after,
            metadata=metadata,
            **ctx,
        )

    @classmethod
    def log_delete(cls, resource_type: str, resource_id: Any, data: Any, description: Optional[str] = None, **ctx) -> bool:
        return cls.log(
            AuditLog.ACTION_DELETE,
            resource_type,
            description or f"{resource_type} excluído",
            resource_id=resource_id,
            before_data=data,
            **ctx,
        )

    @classmethod
    def log_login(cls, success: bool, email: str, user=None, ip_address: Optional[str] = None) -> bool:
        return cls.log(
            AuditLog.ACTION_LOGIN if success else AuditLog.ACTION_LOGIN_FAILED,
            'user',
            'Login realizado' if success else 'Falha no login',
            user=user,
            resource_id=user.pk if user is not None else None,
            metadata={'email': email},
            ip_address=ip_address,
        )

    @classmethod
    def log_permission_denied(cls, resource_type: str, resource_id: Any = None, reason: Optional[str] = None, **ctx) -> bool:
        return cls.log(
            AuditLog.ACTION_PERMISSION_DENIED,
            resource_type,
            f"Permissão negada: {reason or 'não autorizado'}",
            resource_id=resource_id,
            metadata={'reason': reason},
            **ctx,
        )

    @classmethod
    def log_export(cls, export_type: str, record_count: int, fmt: str, **ctx) -> bool:
        return cls.log(
            AuditLog.ACTION_EXPORT,
            'report',
            f"Exportação de {export_type}",
            metadata={'export_type': export_type, 'record_count': record_count, 'format': fmt},
            **ctx,
        )

    @classmethod
    def log_import(cls, resource_type: str, imported: int, failed: int, source: str, **ctx) -> bool:
        metadata = dict(ctx.pop('metadata', None) or {})
        metadata.update({'imported_count': imported, 'invalid_count': failed, 'source_file': source})
        return cls.log(
            AuditLog.ACTION_IMPORT,
            resource_type,
            f"Importação de {source}: {imported} linhas importadas, {failed} com erro",
            metadata=metadata,
            **ctx,
        )

    @staticmethod
    def changed_fields(before: Any, after: Any) -> List[str]:
        if not isinstance(before, dict) or not isinstance(after, dict):
            return []
        before, after = _json_safe(before), _json_safe(after)
        keys = sorted(set(before) | set(after))
        return [k for k in keys if before.get(k) != after.get(k)]

    @staticmethod
    def sanitize_data(data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        sanitized = dict(data)
        for key in sanitized:
            if any(field in key.lower() for field in SENSITIVE_FIELDS):
                sanitized[key] = REDACTED
        return sanitized


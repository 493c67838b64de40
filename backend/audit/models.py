from django.conf import settings
from django.db import models


class AuditLog(models.Model):
    ACTION_CREATE = 'create'
    ACTION_UPDATE = 'update'
    ACTION_DELETE = 'delete'
    ACTION_READ = 'read'
    ACTION_LOGIN = 'login'
    ACTION_LOGOUT = 'logout'
    ACTION_LOGIN_FAILED = 'login_failed'
    ACTION_PASSWORD_RESET = 'password_reset'
    ACTION_PERMISSION_DENIED = 'permission_denied'
    ACTION_EXPORT = 'export'
    ACTION_IMPORT = 'import'
    ACTION_PAYMENT = 'payment'
    ACTION_APPROVE = 'approve'
    ACTION_REJECT = 'reject'
    ACTION_CHOICES = [
        (ACTION_CREATE, 'Criar'),
        (ACTION_UPDATE, 'Atualizar'),
        (ACTION_DELETE, 'Excluir'),
        (ACTION_READ, 'Visualizar'),
        (ACTION_LOGIN, 'Login'),
        (ACTION_LOGOUT, 'Logout'),
        (ACTION_LOGIN_FAILED, 'Falha no Login'),
        (ACTION_PASSWORD_RESET, 'Redefinição de Senha'),
        (ACTION_PERMISSION_DENIED, 'Permissão Negada'),
        (ACTION_EXPORT, 'Exportar'),
        (ACTION_IMPORT, 'Importar'),
        (ACTION_PAYMENT, 'Pagamento'),
        (ACTION_APPROVE, 'Aprovar'),
        (ACTION_REJECT, 'Rejeitar'),
    ]

    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name='audit_logs')
    action = models.CharField(max_length=32, choices=ACTION_CHOICES)
    resource_type = models.CharField(max_length=64)
    resource_id = models.CharField(max_length=64, blank=True, null=True)
    description = models.TextField()
    metadata = models.JSONField(blank=True, null=True)
    before_data = models.JSONField(blank=True, null=True)
    after_data = models.JSONField(blank=True, null=True)
    ip_address = models.GenericIPAddressField(blank=True, null=True)
    user_agent = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['action', '-created_at'], name='audit_action_created_idx'),
            models.Index(fields=['resource_type', '-created_at'], name='audit_resource_created_idx'),
        ]

    def __str__(self):
        return f"{self.created_at:%Y-%m-%d %H:%M} {self.action} {self.resource_type}:{self.resource_id or '-'}"

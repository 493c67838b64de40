import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('create', 'Criar'), ('update', 'Atualizar'), ('delete', 'Excluir'), ('read', 'Visualizar'), ('login', 'Login'), ('logout', 'Logout'), ('login_failed', 'Falha no Login'), ('password_reset', 'Redefinição de Senha'), ('permission_denied', 'Permissão Negada'), ('export', 'Exportar'), ('import', 'Importar'), ('payment', 'Pagamento'), ('approve', 'Aprovar'), ('reject', 'Rejeitar')], max_length=32)),
                ('resource_type', models.CharField(max_length=64)),
                ('resource_id', models.CharField(blank=True, max_length=64, null=True)),
                ('description', models.TextField()),
                ('metadata', models.JSONField(blank=True, null=True)),
                ('before_data', models.JSONField(blank=True, null=True)),
                ('after_data', models.JSONField(blank=True, null=True)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['action', '-created_at'], name='audit_action_created_idx'),
                    models.Index(fields=['resource_type', '-created_at'], name='audit_resource_created_idx'),
                ],
            },
        ),
    ]

from rest_framework import serializers

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = [
            'id', 'user', 'username', 'action', 'resource_type', 'resource_id',
            'description', 'metadata', 'before_data', 'after_data',
            'ip_address', 'user_agent', 'created_at',
        ]
        read_only_fields = fields

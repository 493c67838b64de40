from rest_framework import serializers

from .models import Carrier


class CarrierSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = Carrier
        fields = [
            'id', 'username', 'email', 'cnpj', 'razao_social', 'nome_fantasia', 'rntrc',
            'rntrc_status', 'rntrc_expires_at', 'antt_registration_status', 'insurance_valid_until',
            'approval_status', 'rejection_reason', 'payment_term_days',
            'approved_at', 'created_at',
        ]
        read_only_fields = fields


class CarrierRegisterSerializer(serializers.Serializer):
    cnpj = serializers.CharField(max_length=18)
    rntrc = serializers.CharField(max_length=20, required=False, allow_blank=True)


class ApproveSerializer(serializers.Serializer):
    payment_term_days = serializers.IntegerField(required=False)
    reapprove = serializers.BooleanField(required=False, default=False)


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True)

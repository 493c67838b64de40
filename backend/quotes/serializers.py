from rest_framework import serializers

from rate_tables.services.resolver import format_zip
from .models import Freight
from .services.repasse import is_overdue


class QuoteInputSerializer(serializers.Serializer):
    origin_zip = serializers.CharField(max_length=9)
    dest_zip = serializers.CharField(max_length=9)
    items = serializers.ListField(child=serializers.DictField(), required=False, allow_empty=True)
    taxable_weight = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=0, required=False)
    invoice_value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)
    carrier_id = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs.get('items') and attrs.get('taxable_weight') is None:
            raise serializers.ValidationError('Informe os itens da carga ou o peso taxável.')
        return attrs


class CheckoutInputSerializer(QuoteInputSerializer):
    route_id = serializers.IntegerField()
    checkout_session_id = serializers.CharField(max_length=255, required=False, allow_blank=True)
    payment_status = serializers.ChoiceField(choices=Freight.PAYMENT_STATUS_CHOICES, required=False, default=Freight.PAYMENT_PAID)


class QuoteOfferSerializer(serializers.Serializer):
    route_id = serializers.IntegerField(allow_null=True)
    carrier_id = serializers.IntegerField(allow_null=True)
    carrier = serializers.CharField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    deadline_days = serializers.IntegerField(allow_null=True)
    is_estimate = serializers.BooleanField()


class QuoteResultSerializer(serializers.Serializer):
    request_id = serializers.IntegerField(allow_null=True)
    origin_zip = serializers.CharField()
    dest_zip = serializers.CharField()
    taxable_weight = serializers.DecimalField(max_digits=12, decimal_places=3)
    strategy = serializers.CharField(allow_null=True)
    used_fallback = serializers.BooleanField()
    offers = QuoteOfferSerializer(many=True)


class FreightSerializer(serializers.ModelSerializer):
    carrier_name = serializers.CharField(source='carrier.display_name', read_only=True)
    origin_zip_display = serializers.SerializerMethodField()
    dest_zip_display = serializers.SerializerMethodField()

    class Meta:
        model = Freight
        fields = [
            'id', 'carrier', 'carrier_name', 'route',
            'origin_zip', 'origin_zip_display', 'dest_zip', 'dest_zip_display',
            'taxable_weight', 'invoice_value', 'price',
            'payment_status', 'paid_at', 'created_at',
        ]
        read_only_fields = fields

    def get_origin_zip_display(self, obj):
        return format_zip(obj.origin_zip)

    def get_dest_zip_display(self, obj):
        return format_zip(obj.dest_zip)


class RepasseSerializer(FreightSerializer):
    """Freight as seen by carriers and admins, with the payout split."""
    is_overdue = serializers.SerializerMethodField()

    class Meta(FreightSerializer.Meta):
        fields = FreightSerializer.Meta.fields + [
            'cost_total', 'margin_percent',
            'carrier_amount', 'rotaclick_amount', 'payment_term_days',
            'repasse_due_date', 'repasse_status', 'repasse_paid_at', 'is_overdue',
        ]
        read_only_fields = fields

    def get_is_overdue(self, obj):
        return is_overdue(obj, self.context.get('today'))


class RepasseSummarySerializer(serializers.Serializer):
    pending_count = serializers.IntegerField()
    pending_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    overdue_count = serializers.IntegerField()
    overdue_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_count = serializers.IntegerField()
    paid_total = serializers.DecimalField(max_digits=14, decimal_places=2)
    rotaclick_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    gross_total = serializers.DecimalField(max_digits=14, decimal_places=2)

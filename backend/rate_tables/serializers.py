from rest_framework import serializers

from .models import FreightRoute
from .services.resolver import format_zip


class FreightRouteSerializer(serializers.ModelSerializer):
    carrier_name = serializers.CharField(source='carrier.display_name', read_only=True)
    origin_zip_display = serializers.SerializerMethodField()
    dest_zip_display = serializers.SerializerMethodField()

    class Meta:
        model = FreightRoute
        fields = [
            'id', 'carrier', 'carrier_name',
            'origin_zip', 'origin_zip_end', 'origin_zip_display',
            'dest_zip', 'dest_zip_end', 'dest_zip_display',
            'cost_price_per_kg', 'cost_min_price', 'margin_percent',
            'price_per_kg', 'min_price', 'deadline_days',
            'status', 'rate_card', 'source_file', 'imported_at',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_origin_zip_display(self, obj):
        return format_zip(obj.origin_zip)

    def get_dest_zip_display(self, obj):
        return format_zip(obj.dest_zip)


class RouteWriteSerializer(serializers.Serializer):
    carrier_id = serializers.IntegerField(required=False)
    origin_zip = serializers.CharField(max_length=9)
    origin_zip_end = serializers.CharField(max_length=9, required=False, allow_blank=True, allow_null=True)
    dest_zip = serializers.CharField(max_length=9)
    dest_zip_end = serializers.CharField(max_length=9, required=False, allow_blank=True, allow_null=True)
    cost_price_per_kg = serializers.DecimalField(max_digits=12, decimal_places=4)
    cost_min_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    margin_percent = serializers.DecimalField(max_digits=6, decimal_places=2)
    deadline_days = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class RouteStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=FreightRoute.STATUS_CHOICES)


class CarrierFilterSerializer(serializers.Serializer):
    """``?carrier=<id>`` on admin listings."""
    carrier = serializers.IntegerField(required=False, min_value=1, max_value=2 ** 63 - 1)

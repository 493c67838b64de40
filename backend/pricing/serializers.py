from rest_framework import serializers


class CargoWeightsSerializer(serializers.Serializer):
    real_weight = serializers.DecimalField(max_digits=12, decimal_places=3)
    cubed_weight = serializers.DecimalField(max_digits=12, decimal_places=3)
    taxable_weight = serializers.DecimalField(max_digits=12, decimal_places=3)
    is_quotable = serializers.BooleanField()


class CostParametersSerializer(serializers.Serializer):
    diesel_price = serializers.DecimalField(max_digits=10, decimal_places=4, required=False)
    avg_consumption_km_l = serializers.DecimalField(max_digits=10, decimal_places=4, required=False)
    variable_cost_per_km = serializers.DecimalField(max_digits=10, decimal_places=4, required=False)
    fixed_monthly_cost = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    estimated_monthly_km = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    waiting_cost_per_hour = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    admin_fee_percent = serializers.DecimalField(max_digits=6, decimal_places=2, required=False)
    pickup_delivery_fixed_fee = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    empty_return_factor = serializers.DecimalField(max_digits=6, decimal_places=4, required=False)
    vale_pedagio_required = serializers.BooleanField(required=False)


class AnalyzeInputSerializer(serializers.Serializer):
    km_estimado = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    price_input = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    horas_estimadas = serializers.DecimalField(max_digits=8, decimal_places=2, min_value=0, required=False, default=0)
    pedagio_estimado = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, default=0)
    vale_pedagio_included = serializers.BooleanField(required=False, default=False)
    antt_operation_code = serializers.CharField(max_length=32, required=False, allow_null=True, allow_blank=True)
    custom_axles = serializers.IntegerField(min_value=1, max_value=20, required=False, allow_null=True)
    carrier_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    cost_parameters = CostParametersSerializer(required=False)


class ComplianceSerializer(serializers.Serializer):
    antt_floor_price = serializers.DecimalField(max_digits=24, decimal_places=2)
    is_below_antt_floor = serializers.BooleanField()
    rntrc_status = serializers.CharField()
    toll_compliance = serializers.CharField()


class ComplianceAlertSerializer(serializers.Serializer):
    severity = serializers.CharField()
    code = serializers.CharField()
    message = serializers.CharField()


class AnalyzeResultSerializer(serializers.Serializer):
    total_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    breakdown = serializers.DictField(child=serializers.DecimalField(max_digits=14, decimal_places=2))
    profit_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    margin_percent = serializers.DecimalField(max_digits=10, decimal_places=2)
    classification = serializers.CharField()
    compliance = ComplianceSerializer()
    alerts = ComplianceAlertSerializer(many=True)
    blocking = serializers.BooleanField()
    suggestions = serializers.ListField(child=serializers.CharField())
    metadata = serializers.DictField()

import logging
from decimal import Decimal

from django.conf import settings
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from carriers.models import Carrier
from .dataclasses import AnttReference, CarrierCompliance, CostParameters, TripInput
from .serializers import AnalyzeInputSerializer, AnalyzeResultSerializer, CargoWeightsSerializer
from .services.cargo import aggregate_cargo, parse_cargo_items
from .services.cost_analysis import (
    DEFAULT_AXLES,
    build_suggestions,
    calculate_profit,
    classify_margin,
    estimate_total_cost,
    validate_antt_compliance,
)
from .services.errors import PricingError

logger = logging.getLogger(__name__)


class CargoWeightsView(APIView):
    """Real, cubed and taxable weight for a list of cargo items."""

    def post(self, request):
        try:
            items = parse_cargo_items(request.data.get('items') or [])
            weights = aggregate_cargo(items)
        except PricingError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CargoWeightsSerializer(weights.as_dict()).data)


def _analyzed_carrier(request, carrier_id):
    """The caller's own carrier; admins may name any carrier."""
    if request.user.is_platform_admin and carrier_id:
        return get_object_or_404(Carrier, pk=carrier_id)
    if request.user.is_carrier:
        return Carrier.objects.filter(user=request.user).first()
    return None


class CostAnalysisView(APIView):
    """Profitability of a trip price plus ANTT floor and registration checks."""

    def post(self, request):
        ser = AnalyzeInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        carrier = _analyzed_carrier(request, data.get('carrier_id'))
        if carrier is None:
            return Response({"detail": "Transportadora não encontrada para o usuário autenticado"},
                            status=status.HTTP_404_NOT_FOUND)

        params = CostParameters(**data.get('cost_parameters', {}))
        trip = TripInput(
            km=data['km_estimado'],
            price=data['price_input'],
            hours=data.get('horas_estimadas') or Decimal(0),
            toll=data.get('pedagio_estimado') or Decimal(0),
        )
        try:
            estimate = estimate_total_cost(trip, params)
        except PricingError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        reference = AnttReference.from_dict(settings.ANTT_REFERENCE)
        compliance = validate_antt_compliance(
            trip, reference, CarrierCompliance.from_carrier(carrier), params,
            axles=data.get('custom_axles') or DEFAULT_AXLES,
            operation_code=data.get('antt_operation_code'),
            vale_pedagio_included=data['vale_pedagio_included'],
        )
        profit, margin = calculate_profit(trip.price, estimate.total_cost)
        logger.info("Pricing analysis for carrier %s: price=%s cost=%s floor=%s blocking=%s",
                    carrier.pk, trip.price, estimate.total_cost, compliance.antt_floor_price, compliance.blocking)
        return Response(AnalyzeResultSerializer({
            "total_cost": estimate.total_cost,
            "breakdown": estimate.breakdown,
            "profit_value": profit,
            "margin_percent": margin,
            "classification": classify_margin(margin),
            "compliance": compliance,
            "alerts": compliance.alerts,
            "blocking": compliance.blocking,
            "suggestions": build_suggestions(margin, estimate.total_cost, trip.price, compliance.antt_floor_price),
            "metadata": {
                "antt_source": reference.source_url,
                "antt_version": reference.version_tag,
                "used_default_params": 'cost_parameters' not in data,
            },
        }).data)

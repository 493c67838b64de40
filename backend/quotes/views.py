import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from accounts.permissions import IsCarrier, IsCustomer, IsPlatformAdmin
from audit.logger import client_ip
from carriers.terms import InvalidPaymentTermError
from pricing.services.cargo import aggregate_cargo, parse_cargo_items
from pricing.services.errors import PricingError
from rate_tables.models import FreightRoute
from rate_tables.serializers import CarrierFilterSerializer
from rate_tables.services.errors import RateTableError
from rate_tables.services.resolver import NoRouteAvailable, normalize_zip, resolve_routes
from .models import Freight
from .serializers import (
    CheckoutInputSerializer,
    FreightSerializer,
    QuoteInputSerializer,
    QuoteResultSerializer,
    RepasseSerializer,
    RepasseSummarySerializer,
)
from .services.errors import FreightNotFound, QuoteError, RepasseError
from .services.quoting import build_quote
from .services.repasse import mark_repasse_paid, record_checkout, repasse_summary

logger = logging.getLogger(__name__)

REPASSE_FILTERS = ('pending', 'paid', 'overdue', 'all')


class FreightPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 200


def _weights(data):
    """Aggregated cargo when items are sent, otherwise the bare taxable weight."""
    if data.get('items'):
        return aggregate_cargo(parse_cargo_items(data['items']))
    return data['taxable_weight']


class QuoteCalculateView(APIView):
    """Public quote: anyone may ask, rate-limited per client."""
    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = 'quotes'

    def post(self, request):
        ser = QuoteInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        try:
            result = build_quote(
                data['origin_zip'], data['dest_zip'], _weights(data),
                invoice_value=data.get('invoice_value'),
                carrier_id=data.get('carrier_id'),
                user=request.user,
            )
        except (PricingError, RateTableError, QuoteError) as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(QuoteResultSerializer(result.as_dict()).data)


class CheckoutView(APIView):
    """
    Records the outcome of a hosted checkout for a chosen offer.

    The price is recomputed from the route and cargo; the client only names
    the route it picked.
    """
    permission_classes = [IsCustomer]

    def post(self, request):
        ser = CheckoutInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        route = FreightRoute.objects.select_related('carrier').filter(pk=data['route_id']).first()
        if route is None:
            return Response({"detail": "Rota não encontrada"}, status=status.HTTP_404_NOT_FOUND)

        try:
            weights = _weights(data)
            taxable = getattr(weights, 'taxable_weight', weights)
            origin = normalize_zip(data['origin_zip'])
            dest = normalize_zip(data['dest_zip'])
            lookup = resolve_routes(origin, dest, carrier_id=route.carrier_id)
            if isinstance(lookup, NoRouteAvailable) or route.pk not in {r.pk for r in lookup.routes}:
                return Response({"detail": "Rota não atende este trecho"}, status=status.HTTP_400_BAD_REQUEST)
            freight = record_checkout(
                request.user, route, origin, dest, taxable,
                invoice_value=data.get('invoice_value'),
                checkout_session_id=data.get('checkout_session_id') or None,
                payment_status=data['payment_status'],
                ip_address=client_ip(request),
            )
        except (PricingError, RateTableError, QuoteError, RepasseError, InvalidPaymentTermError) as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(FreightSerializer(freight).data, status=status.HTTP_201_CREATED)


class MyFreightsView(APIView):
    permission_classes = [IsCustomer]

    def get(self, request):
        qs = Freight.objects.filter(customer=request.user).select_related('carrier')
        paginator = FreightPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(FreightSerializer(page, many=True).data)


def _filter_repasses(qs, status_filter, today):
    qs = qs.filter(payment_status=Freight.PAYMENT_PAID)
    if status_filter == 'pending':
        return qs.filter(repasse_status=Freight.REPASSE_PENDING).order_by('repasse_due_date', 'id')
    if status_filter == 'overdue':
        return (qs.filter(repasse_status=Freight.REPASSE_PENDING, repasse_due_date__lt=today)
                  .order_by('repasse_due_date', 'id'))
    if status_filter == 'paid':
        return qs.filter(repasse_status=Freight.REPASSE_PAID).order_by('-repasse_paid_at', '-id')
    return qs.order_by('-paid_at', '-id')


class CarrierRepassesView(APIView):
    permission_classes = [IsCarrier]

    def get(self, request):
        today = timezone.localdate()
        base = Freight.objects.filter(carrier__user=request.user).select_related('carrier')
        qs = _filter_repasses(base, request.query_params.get('status', 'all'), today)
        paginator = FreightPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        response = paginator.get_paginated_response(
            RepasseSerializer(page, many=True, context={'today': today}).data)
        response.data['summary'] = RepasseSummarySerializer(repasse_summary(base, today)).data
        return response


class AdminRepasseListView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        status_filter = request.query_params.get('status', 'pending')
        if status_filter not in REPASSE_FILTERS:
            return Response({"detail": f"Filtro inválido: {status_filter}"}, status=status.HTTP_400_BAD_REQUEST)
        filters = CarrierFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        today = timezone.localdate()
        base = Freight.objects.select_related('carrier')
        if filters.validated_data.get('carrier'):
            base = base.filter(carrier_id=filters.validated_data['carrier'])
        qs = _filter_repasses(base, status_filter, today)
        paginator = FreightPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        response = paginator.get_paginated_response(
            RepasseSerializer(page, many=True, context={'today': today}).data)
        response.data['summary'] = RepasseSummarySerializer(repasse_summary(base, today)).data
        return response


class AdminRepasseMarkPaidView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request, pk):
        try:
            outcome = mark_repasse_paid(pk, request.user, ip_address=client_ip(request))
        except FreightNotFound as e:
            return Response({"detail": str(e)}, status=status.HTTP_404_NOT_FOUND)
        except RepasseError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        freight = Freight.objects.select_related('carrier').get(pk=pk)
        body = RepasseSerializer(freight).data
        body['status'] = outcome
        return Response(body)

import logging

from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsCarrier, IsPlatformAdmin
from audit.logger import client_ip
from carriers.models import Carrier
from core.services import get_decimal
from pricing.services.errors import PricingError
from .models import FreightRoute
from .serializers import CarrierFilterSerializer, FreightRouteSerializer, RouteStatusSerializer, RouteWriteSerializer
from .services.errors import RateTableError
from .services.importer import import_workbook
from .services.routes import create_route, delete_route, set_route_status, update_route
from .services.template import TEMPLATE_FILENAME, XLSX_CONTENT_TYPE, build_template

logger = logging.getLogger(__name__)


class RoutePagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 500


def _import_response(result):
    body = result.as_dict()
    if result.imported_count == 0:
        body['detail'] = 'Nenhuma linha válida encontrada'
        return Response(body, status=status.HTTP_400_BAD_REQUEST)
    return Response(body, status=status.HTTP_200_OK)


def _run_import(request, carrier, margin):
    upload = request.FILES.get('file')
    if upload is None:
        return Response({"detail": "Arquivo não enviado"}, status=status.HTTP_400_BAD_REQUEST)
    try:
        result = import_workbook(upload, carrier, margin, source_file=upload.name,
                                 user=request.user, ip_address=client_ip(request))
    except (RateTableError, PricingError) as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return _import_response(result)


class AdminRateImportView(APIView):
    permission_classes = [IsPlatformAdmin]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        carrier_id = request.data.get('carrier_id')
        if not carrier_id:
            return Response({"detail": "Selecione uma transportadora"}, status=status.HTTP_400_BAD_REQUEST)
        carrier = Carrier.objects.filter(pk=carrier_id).first()
        if carrier is None:
            return Response({"detail": "Transportadora não encontrada"}, status=status.HTTP_404_NOT_FOUND)
        margin = request.data.get('margin_percent')
        if margin in (None, ''):
            margin = get_decimal('default_margin_percent')
        return _run_import(request, carrier, margin)


class CarrierRateImportView(APIView):
    """Carriers upload their own table; the platform default margin applies."""
    permission_classes = [IsCarrier]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        carrier = Carrier.objects.filter(user=request.user).first()
        if carrier is None:
            return Response({"detail": "Cadastre sua transportadora antes de importar"}, status=status.HTTP_400_BAD_REQUEST)
        return _run_import(request, carrier, get_decimal('default_margin_percent'))


class RateTemplateView(APIView):

    def get(self, request):
        response = HttpResponse(build_template(), content_type=XLSX_CONTENT_TYPE)
        response['Content-Disposition'] = f'attachment; filename="{TEMPLATE_FILENAME}"'
        response['Cache-Control'] = 'no-store'
        return response


class MyRoutesView(APIView):
    permission_classes = [IsCarrier]

    def get(self, request):
        qs = FreightRoute.objects.filter(carrier__user=request.user).select_related('carrier')
        paginator = RoutePagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(FreightRouteSerializer(page, many=True).data)


class AdminRouteListView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        filters = CarrierFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        qs = FreightRoute.objects.select_related('carrier')
        params = request.query_params
        if filters.validated_data.get('carrier'):
            qs = qs.filter(carrier_id=filters.validated_data['carrier'])
        if params.get('status'):
            qs = qs.filter(status=params['status'])
        if params.get('origin_zip'):
            qs = qs.filter(origin_zip__startswith=''.join(ch for ch in params['origin_zip'] if ch.isdigit()))
        if params.get('dest_zip'):
            qs = qs.filter(dest_zip__startswith=''.join(ch for ch in params['dest_zip'] if ch.isdigit()))
        paginator = RoutePagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(FreightRouteSerializer(page, many=True).data)

    def post(self, request):
        ser = RouteWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        carrier = Carrier.objects.filter(pk=data.pop('carrier_id', None)).first()
        if carrier is None:
            return Response({"detail": "Transportadora não encontrada"}, status=status.HTTP_400_BAD_REQUEST)
        try:
            route = create_route(carrier, data, user=request.user, ip_address=client_ip(request))
        except (RateTableError, PricingError) as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(FreightRouteSerializer(route).data, status=status.HTTP_201_CREATED)


class AdminRouteDetailView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request, pk):
        route = get_object_or_404(FreightRoute.objects.select_related('carrier'), pk=pk)
        return Response(FreightRouteSerializer(route).data)

    def patch(self, request, pk):
        route = get_object_or_404(FreightRoute, pk=pk)
        ser = RouteWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        data.pop('carrier_id', None)
        try:
            route = update_route(route, data, user=request.user, ip_address=client_ip(request))
        except (RateTableError, PricingError) as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(FreightRouteSerializer(route).data)

    def delete(self, request, pk):
        route = get_object_or_404(FreightRoute, pk=pk)
        outcome = delete_route(route, user=request.user, ip_address=client_ip(request))
        if outcome == 'deactivated':
            return Response({"status": outcome, "detail": "Rota possui fretes e foi desativada"}, status=status.HTTP_200_OK)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdminRouteStatusView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request, pk):
        route = get_object_or_404(FreightRoute, pk=pk)
        ser = RouteStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        route = set_route_status(route, ser.validated_data['status'], user=request.user, ip_address=client_ip(request))
        return Response(FreightRouteSerializer(route).data)

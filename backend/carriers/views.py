from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsCarrier, IsPlatformAdmin
from audit.logger import client_ip
from core.services import get_int
from .models import Carrier
from .serializers import ApproveSerializer, CarrierRegisterSerializer, CarrierSerializer, RejectSerializer
from .services.approval import CarrierApprovalError, approve_carrier, register_carrier, reject_carrier
from .services.tax_id import LookupUnavailableError, TaxIdValidationError, lookup_company
from .terms import InvalidPaymentTermError


class ValidateCnpjView(APIView):
    permission_classes = [AllowAny]

    def post(self, request):
        try:
            company = lookup_company(request.data.get('cnpj'))
        except LookupUnavailableError as e:
            return Response({"detail": e.reason}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except TaxIdValidationError as e:
            return Response({"detail": e.reason}, status=status.HTTP_400_BAD_REQUEST)
        return Response({
            "cnpj": company.cnpj,
            "razao_social": company.razao_social,
            "nome_fantasia": company.nome_fantasia,
            "cnae_principal": company.cnae_principal,
        })


class CarrierRegisterView(APIView):
    permission_classes = [IsCarrier]

    def post(self, request):
        ser = CarrierRegisterSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            carrier = register_carrier(request.user, ser.validated_data['cnpj'],
                                       ser.validated_data.get('rntrc', ''), ip_address=client_ip(request))
        except LookupUnavailableError as e:
            return Response({"detail": e.reason}, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        except TaxIdValidationError as e:
            return Response({"detail": e.reason}, status=status.HTTP_400_BAD_REQUEST)
        except CarrierApprovalError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CarrierSerializer(carrier).data, status=status.HTTP_201_CREATED)


class MyCarrierView(APIView):
    permission_classes = [IsCarrier]

    def get(self, request):
        carrier = get_object_or_404(Carrier, user=request.user)
        return Response(CarrierSerializer(carrier).data)


class AdminCarrierListView(APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        qs = Carrier.objects.select_related('user')
        status_filter = request.query_params.get('status')
        if status_filter:
            qs = qs.filter(approval_status=status_filter)
        return Response(CarrierSerializer(qs, many=True).data)


class AdminCarrierApproveView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request, pk):
        carrier = get_object_or_404(Carrier, pk=pk)
        ser = ApproveSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        term = ser.validated_data.get('payment_term_days') or get_int('default_payment_term_days')
        try:
            carrier = approve_carrier(carrier, term, request.user,
                                      reapprove=ser.validated_data['reapprove'], ip_address=client_ip(request))
        except (CarrierApprovalError, InvalidPaymentTermError) as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CarrierSerializer(carrier).data)


class AdminCarrierRejectView(APIView):
    permission_classes = [IsPlatformAdmin]

    def post(self, request, pk):
        carrier = get_object_or_404(Carrier, pk=pk)
        ser = RejectSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        try:
            carrier = reject_carrier(carrier, ser.validated_data['reason'], request.user, ip_address=client_ip(request))
        except CarrierApprovalError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CarrierSerializer(carrier).data)

from rest_framework import status, views
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from accounts.permissions import IsPlatformAdmin
from audit.logger import client_ip
from .services import PUBLIC_KEYS, SettingsError, get_settings, update_setting, update_settings_batch


class PublicSettingsView(views.APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response(get_settings(PUBLIC_KEYS))


class AdminSettingsView(views.APIView):
    permission_classes = [IsPlatformAdmin]

    def get(self, request):
        return Response(get_settings())

    def put(self, request):
        data = request.data
        if not isinstance(data, dict) or not data:
            return Response({"detail": "Envie um objeto com as configurações"}, status=status.HTTP_400_BAD_REQUEST)
        try:
            values = update_settings_batch(data, user=request.user, ip_address=client_ip(request))
        except SettingsError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(values)


class AdminSettingDetailView(views.APIView):
    permission_classes = [IsPlatformAdmin]

    def put(self, request, key):
        if 'value' not in request.data:
            return Response({"detail": "value is required"}, status=status.HTTP_400_BAD_REQUEST)
        try:
            row = update_setting(key, request.data['value'], user=request.user, ip_address=client_ip(request))
        except SettingsError as e:
            return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"key": row.key, "value": row.value, "updated_at": row.updated_at})

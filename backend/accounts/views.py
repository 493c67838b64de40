import json
from django.contrib.auth import authenticate
from django.contrib.auth.hashers import make_password
from django.views.decorators.csrf import csrf_exempt
from django.http import JsonResponse
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny

from audit.logger import AuditLogger, client_ip
from audit.models import AuditLog
from .models import CustomUser

SELF_SERVICE_ROLES = {CustomUser.ROLE_CARRIER, CustomUser.ROLE_CUSTOMER}


def _error(detail: str, status_code: int):
    """Consistent error payload shape across API: {'detail': ...}."""
    return JsonResponse({'detail': detail}, status=status_code)


@csrf_exempt
@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """
    Login endpoint that returns a token and user role
    """
    try:
        data = json.loads(request.body)
        username = data.get('username')
        password = data.get('password')
    except json.JSONDecodeError:
        return _error('Invalid JSON', 400)

    if not username or not password:
        return _error('Username and password required', 400)

    user = authenticate(username=username, password=password)
    if not user:
        AuditLogger.log_login(False, username, ip_address=client_ip(request))
        return _error('Invalid credentials', 401)

    token, created = Token.objects.get_or_create(user=user)
    AuditLogger.log_login(True, username, user=user, ip_address=client_ip(request))

    return JsonResponse({
        'token': token.key,
        'role': user.role,
        'username': user.username
    })


@csrf_exempt
@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    """
    Self-registration for customers and carriers. Admins are created by other admins.
    """
    try:
        data = json.loads(request.body)
        username = data.get('username')
        password = data.get('password')
        email = data.get('email', '')
        role = data.get('role', CustomUser.ROLE_CUSTOMER)
    except json.JSONDecodeError:
        return _error('Invalid JSON', 400)

    if not username or not password:
        return _error('Username and password required', 400)

    if role not in SELF_SERVICE_ROLES:
        return _error('Invalid role', 400)

    if CustomUser.objects.filter(username=username).exists():
        return _error('Username already exists', 400)

    user = CustomUser.objects.create(
        username=username,
        email=email,
        password=make_password(password),
        role=role
    )

    token = Token.objects.create(user=user)
    AuditLogger.log_create('user', user.pk, {'username': username, 'role': role},
                           description='Usuário registrado', user=user)

    return JsonResponse({
        'token': token.key,
        'role': user.role,
        'username': user.username
    }, status=201)


@api_view(['GET'])
def me_view(request):
    """The authenticated user, plus the carrier profile status for carriers."""
    user = request.user
    carrier = getattr(user, 'carrier', None) if user.is_carrier else None
    return JsonResponse({
        'id': user.pk,
        'username': user.username,
        'email': user.email,
        'role': user.role,
        'carrier_id': carrier.pk if carrier else None,
        'carrier_status': carrier.approval_status if carrier else None,
    })


@api_view(['POST'])
def logout_view(request):
    Token.objects.filter(user=request.user).delete()
    AuditLogger.log(AuditLog.ACTION_LOGOUT, 'user', 'Logout realizado',
                    user=request.user, resource_id=request.user.pk, ip_address=client_ip(request))
    return JsonResponse({'detail': 'Sessão encerrada'})

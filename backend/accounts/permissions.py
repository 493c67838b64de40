from rest_framework import permissions


class IsPlatformAdmin(permissions.BasePermission):
    """
    Only platform administrators: carrier approval, repasses, audit, settings.
    """
    message = 'Acesso negado. Apenas administradores.'

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.is_platform_admin


class IsCarrier(permissions.BasePermission):
    """
    Only carrier (transportadora) accounts.
    """
    message = 'Acesso restrito a transportadoras.'

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.is_carrier


class IsCustomer(permissions.BasePermission):
    """
    Only customer (cliente) accounts.
    """
    message = 'Acesso restrito a clientes.'

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.is_customer

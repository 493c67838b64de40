from django.urls import path

from .views import (
    AdminCarrierApproveView,
    AdminCarrierListView,
    AdminCarrierRejectView,
    CarrierRegisterView,
    MyCarrierView,
    ValidateCnpjView,
)

urlpatterns = [
    path('carriers/validate-cnpj/', ValidateCnpjView.as_view(), name='carrier-validate-cnpj'),
    path('carriers/register/', CarrierRegisterView.as_view(), name='carrier-register'),
    path('carriers/me/', MyCarrierView.as_view(), name='carrier-me'),
    path('admin/carriers/', AdminCarrierListView.as_view(), name='admin-carriers'),
    path('admin/carriers/<int:pk>/approve/', AdminCarrierApproveView.as_view(), name='admin-carrier-approve'),
    path('admin/carriers/<int:pk>/reject/', AdminCarrierRejectView.as_view(), name='admin-carrier-reject'),
]

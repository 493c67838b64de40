from django.urls import path

from .views import (
    AdminRepasseListView,
    AdminRepasseMarkPaidView,
    CarrierRepassesView,
    CheckoutView,
    MyFreightsView,
    QuoteCalculateView,
)

urlpatterns = [
    path('quotes/calculate/', QuoteCalculateView.as_view(), name='quote-calculate'),
    path('quotes/checkout/', CheckoutView.as_view(), name='quote-checkout'),
    path('freights/mine/', MyFreightsView.as_view(), name='my-freights'),
    path('carriers/me/repasses/', CarrierRepassesView.as_view(), name='carrier-repasses'),
    path('admin/repasses/', AdminRepasseListView.as_view(), name='admin-repasses'),
    path('admin/repasses/<int:pk>/mark-paid/', AdminRepasseMarkPaidView.as_view(), name='admin-repasse-mark-paid'),
]

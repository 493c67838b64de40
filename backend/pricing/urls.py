from django.urls import path

from .views import CargoWeightsView, CostAnalysisView

urlpatterns = [
    path('pricing/cargo-weights', CargoWeightsView.as_view(), name='cargo-weights'),
    path('pricing/analyze', CostAnalysisView.as_view(), name='pricing-analyze'),
]

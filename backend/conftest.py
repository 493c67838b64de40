from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient


@pytest.fixture
def make_user(db):
    def _make(username, role="cliente", **extra):
        return get_user_model().objects.create_user(username=username, password="pass", role=role, **extra)
    return _make


@pytest.fixture
def admin_user(make_user):
    return make_user("admin", role="admin")


@pytest.fixture
def customer_user(make_user):
    return make_user("cliente1", role="cliente")


@pytest.fixture
def api_client():
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client
    return _client


@pytest.fixture
def make_carrier(make_user):
    from carriers.models import Carrier

    counter = {"n": 0}

    def _make(status=Carrier.STATUS_APPROVED, payment_term_days=7, name=None):
        counter["n"] += 1
        n = counter["n"]
        user = make_user(f"transp{n}", role="transportadora")
        return Carrier.objects.create(
            user=user,
            cnpj=f"{n:014d}",
            razao_social=name or f"Transportes {n} LTDA",
            approval_status=status,
            payment_term_days=payment_term_days if status == Carrier.STATUS_APPROVED else None,
        )
    return _make


@pytest.fixture
def make_route():
    from rate_tables.models import FreightRoute

    def _make(carrier, origin_zip="01000000", dest_zip="20000000", cost_price_per_kg="2.0000",
              cost_min_price="50.00", margin_percent="20", **extra):
        from pricing.services.margin import publish_rate
        published = publish_rate(Decimal(cost_price_per_kg), Decimal(cost_min_price), Decimal(margin_percent))
        defaults = dict(
            carrier=carrier,
            origin_zip=origin_zip,
            dest_zip=dest_zip,
            cost_price_per_kg=Decimal(cost_price_per_kg),
            cost_min_price=Decimal(cost_min_price),
            margin_percent=Decimal(margin_percent),
            price_per_kg=published.price_per_kg,
            min_price=published.min_price,
            deadline_days=3,
        )
        defaults.update(extra)
        return FreightRoute.objects.create(**defaults)
    return _make


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    from django.core.cache import cache
    cache.clear()
    yield

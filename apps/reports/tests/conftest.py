import pytest
import uuid
from decimal import Decimal
from datetime import datetime, timedelta, timezone
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.purchases.models import ReportArea
from apps.purchases.services import LedgerService


User = get_user_model()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def report_user(db):
    return User.objects.create_user(
        username='stargazer',
        email='stargazer@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def auth_client(api_client, report_user):
    """Return API client authenticated as a regular user."""
    refresh = RefreshToken.for_user(report_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def ledger():
    return LedgerService()


@pytest.fixture
def profile_id():
    return uuid.uuid4()


@pytest.fixture
def buy_credits(db, ledger):
    """Record a purchase; returns the created record."""
    base = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
    counter = {'n': 0}

    def buy(credit_amount=1, report_area=ReportArea.UNIVERSAL, days=0):
        counter['n'] += 1
        record, _ = ledger.record_purchase(
            product_id='com.zorya.report_generation',
            transaction_id=f'report-txn-{counter["n"]}',
            price_usd=Decimal('4.99'),
            localized_price='$4.99',
            currency_code='USD',
            credit_amount=credit_amount,
            purchase_date=base + timedelta(days=days),
            report_area=report_area,
        )
        return record
    return buy

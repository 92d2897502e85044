import pytest
import uuid
from decimal import Decimal
from datetime import datetime, timedelta, timezone
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.purchases.models import ReportArea
from apps.purchases.services import LedgerService


STORE_TOKEN = 'test-store-token'

User = get_user_model()


@pytest.fixture(autouse=True)
def store_token_setting(settings):
    """Configure a known store webhook token for every test."""
    settings.STORE_WEBHOOK_TOKEN = STORE_TOKEN


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def ledger_user(db):
    """Create and return a regular app user."""
    return User.objects.create_user(
        username='reader',
        email='reader@example.com',
        password='TestPass123!',
    )


@pytest.fixture
def ledger_staff(db):
    """Create and return a staff user."""
    return User.objects.create_user(
        username='support',
        email='support@example.com',
        password='TestPass123!',
        is_staff=True,
    )


@pytest.fixture
def auth_client(api_client, ledger_user):
    """Return API client authenticated as a regular user."""
    refresh = RefreshToken.for_user(ledger_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def staff_client(ledger_staff):
    """Return API client authenticated as staff."""
    client = APIClient()
    refresh = RefreshToken.for_user(ledger_staff)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def store_client():
    """Return API client carrying the store integration token."""
    client = APIClient()
    client.credentials(HTTP_X_STORE_TOKEN=STORE_TOKEN)
    return client


@pytest.fixture
def ledger():
    return LedgerService()


@pytest.fixture
def profile_id():
    """Profile a report is generated for."""
    return uuid.uuid4()


@pytest.fixture
def other_profile_id():
    return uuid.uuid4()


@pytest.fixture
def base_date():
    return datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def purchase_kwargs():
    """Keyword arguments for a single report credit purchase."""
    def build(transaction_id='txn-1', **overrides):
        kwargs = {
            'product_id': 'com.zorya.report_generation',
            'transaction_id': transaction_id,
            'price_usd': Decimal('4.99'),
            'localized_price': '$4.99',
            'currency_code': 'USD',
        }
        kwargs.update(overrides)
        return kwargs
    return build


@pytest.fixture
def single_purchase(db, ledger, purchase_kwargs, base_date):
    """One universal credit purchased on the base date."""
    record, _ = ledger.record_purchase(**purchase_kwargs('txn-single', purchase_date=base_date))
    return record


@pytest.fixture
def credit_pack(db, ledger, purchase_kwargs, base_date):
    """A three-credit career pack purchased a day after the base date."""
    record, _ = ledger.record_purchase(**purchase_kwargs(
        'txn-pack',
        credit_amount=3,
        report_area=ReportArea.CAREER,
        purchase_date=base_date + timedelta(days=1),
    ))
    return record


@pytest.fixture
def single_credit(single_purchase):
    return single_purchase.credits.get()


@pytest.fixture
def consumed_credit(ledger, single_credit, profile_id):
    return ledger.consume(single_credit.id, profile_id)


@pytest.fixture
def store_event(base_date):
    """Store event payload as posted by the store integration."""
    return {
        'product_id': 'com.zorya.report_generation',
        'transaction_id': 'store-1000',
        'price_usd': '4.99',
        'localized_price': '$4.99',
        'currency_code': 'usd',
        'purchase_date': base_date.isoformat(),
    }

import pytest
import uuid
from django.urls import reverse
from rest_framework import status
from apps.purchases.catalog import MAX_CREDITS_PER_PURCHASE
from apps.purchases.models import PurchaseCredit, PurchaseRecord, ReportArea


# =============================================================================
# Store Event Tests
# =============================================================================

@pytest.mark.django_db
class TestStoreEvents:
    """Tests for POST /api/purchases/store-events/"""

    def test_store_event_creates_record(self, store_client, store_event):
        """Store integration records a purchase and its credit."""
        url = reverse('purchases:store-events')
        response = store_client.post(url, store_event, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['transaction_id'] == 'store-1000'
        assert response.data['currency_code'] == 'USD'
        assert response.data['credit_amount'] == 1
        assert len(response.data['credits']) == 1
        assert response.data['credits'][0]['consumed'] is False

    def test_replayed_event_returns_existing(self, store_client, store_event):
        """A redelivered notification returns 200 and creates nothing."""
        url = reverse('purchases:store-events')
        first = store_client.post(url, store_event, format='json')
        second = store_client.post(url, store_event, format='json')

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_200_OK
        assert second.data['id'] == first.data['id']
        assert PurchaseRecord.objects.count() == 1
        assert PurchaseCredit.objects.count() == 1

    def test_credit_pack_event(self, store_client, store_event):
        url = reverse('purchases:store-events')
        store_event.update({'credit_amount': 3, 'report_area': 'career'})
        response = store_client.post(url, store_event, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert len(response.data['credits']) == 3
        assert {c['report_area'] for c in response.data['credits']} == {'career'}

    def test_restore_event(self, store_client, store_event):
        url = reverse('purchases:store-events')
        store_event['is_restore'] = True
        response = store_client.post(url, store_event, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['is_restored'] is True

    def test_unknown_product(self, store_client, store_event):
        """Unknown products without an explicit amount are rejected."""
        url = reverse('purchases:store-events')
        store_event['product_id'] = 'com.other.app'
        response = store_client.post(url, store_event, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not PurchaseRecord.objects.exists()

    def test_zero_credit_amount(self, store_client, store_event):
        url = reverse('purchases:store-events')
        store_event['credit_amount'] = 0
        response = store_client.post(url, store_event, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_credit_amount_above_catalog_maximum(self, store_client, store_event):
        """One event cannot mint more credits than the largest pack."""
        url = reverse('purchases:store-events')
        store_event['credit_amount'] = MAX_CREDITS_PER_PURCHASE + 1
        response = store_client.post(url, store_event, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'credit_amount' in response.data
        assert not PurchaseCredit.objects.exists()

    def test_transaction_ids_resembling_pack_positions(self, store_client, store_event):
        """'A:2' and a two credit 'A' are recorded as distinct purchases."""
        url = reverse('purchases:store-events')
        store_event['transaction_id'] = 'A:2'
        first = store_client.post(url, store_event, format='json')
        store_event.update({'transaction_id': 'A', 'credit_amount': 2})
        second = store_client.post(url, store_event, format='json')

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_201_CREATED
        assert sorted(c['sequence'] for c in second.data['credits']) == [1, 2]
        assert {c['transaction_id'] for c in second.data['credits']} == {'A'}
        assert PurchaseCredit.objects.count() == 3

    def test_missing_fields(self, store_client):
        url = reverse('purchases:store-events')
        response = store_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'transaction_id' in response.data

    def test_staff_can_record(self, staff_client, store_event):
        url = reverse('purchases:store-events')
        response = staff_client.post(url, store_event, format='json')

        assert response.status_code == status.HTTP_201_CREATED

    def test_regular_user_forbidden(self, auth_client, store_event):
        url = reverse('purchases:store-events')
        response = auth_client.post(url, store_event, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert not PurchaseRecord.objects.exists()

    def test_wrong_token_rejected(self, api_client, store_event):
        url = reverse('purchases:store-events')
        api_client.credentials(HTTP_X_STORE_TOKEN='wrong-token')
        response = api_client.post(url, store_event, format='json')

        assert response.status_code in [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN]


# =============================================================================
# Restore Tests
# =============================================================================

@pytest.mark.django_db
class TestRestorePurchases:
    """Tests for POST /api/purchases/restore/ and mark-restored."""

    def test_restore_missing_purchases(self, store_client, store_event, single_purchase):
        url = reverse('purchases:restore')
        known = dict(store_event, transaction_id='txn-single')
        response = store_client.post(url, {'events': [store_event, known]}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['restored_count'] == 1
        assert PurchaseRecord.objects.get(transaction_id='store-1000').restored_date is not None

    def test_restore_empty(self, store_client):
        url = reverse('purchases:restore')
        response = store_client.post(url, {'events': []}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['restored_count'] == 0

    def test_mark_restored(self, store_client, single_purchase):
        url = reverse('purchases:mark-restored', args=['txn-single'])
        first = store_client.post(url)
        second = store_client.post(url)

        assert first.status_code == status.HTTP_200_OK
        assert first.data['is_restored'] is True
        assert second.data['restored_date'] == first.data['restored_date']

    def test_mark_restored_unknown(self, store_client, db):
        url = reverse('purchases:mark-restored', args=['missing'])
        response = store_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_mark_restored_forbidden_for_users(self, auth_client, single_purchase):
        url = reverse('purchases:mark-restored', args=['txn-single'])
        response = auth_client.post(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Purchase Record Tests
# =============================================================================

@pytest.mark.django_db
class TestPurchaseRecords:
    """Tests for GET /api/purchases/ and /api/purchases/{id}/"""

    def test_list_records(self, auth_client, single_purchase, credit_pack):
        url = reverse('purchases:purchase-list')
        response = auth_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 2
        # Newest purchase first
        assert response.data['results'][0]['transaction_id'] == 'txn-pack'
        assert response.data['results'][0]['available_count'] == 3

    def test_retrieve_record_with_credits(self, auth_client, credit_pack):
        url = reverse('purchases:purchase-detail', args=[credit_pack.id])
        response = auth_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['id'] == str(credit_pack.id)
        assert len(response.data['credits']) == 3

    def test_list_unauthenticated(self, api_client, single_purchase):
        url = reverse('purchases:purchase-list')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_records_are_read_only(self, auth_client, single_purchase):
        url = reverse('purchases:purchase-detail', args=[single_purchase.id])
        response = auth_client.delete(url)

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        assert PurchaseRecord.objects.filter(id=single_purchase.id).exists()


# =============================================================================
# Credit Tests
# =============================================================================

@pytest.mark.django_db
class TestCreditList:
    """Tests for GET /api/purchases/credits/"""

    def test_list_available_credits(self, auth_client, single_purchase, credit_pack, consumed_credit):
        url = reverse('purchases:credit-list')
        response = auth_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 3
        assert all(not c['consumed'] for c in response.data)

    def test_filter_by_area(self, auth_client, single_purchase, credit_pack):
        url = reverse('purchases:credit-list')
        response = auth_client.get(url, {'report_area': 'health'})

        assert response.status_code == status.HTTP_200_OK
        assert [c['transaction_id'] for c in response.data] == ['txn-single']

    def test_invalid_area(self, auth_client):
        url = reverse('purchases:credit-list')
        response = auth_client.get(url, {'report_area': 'astronomy'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unauthenticated(self, api_client):
        url = reverse('purchases:credit-list')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestCreditSummary:
    """Tests for GET /api/purchases/credits/summary/"""

    def test_summary(self, auth_client, single_purchase, credit_pack):
        url = reverse('purchases:credit-summary')
        response = auth_client.get(url, {'report_area': ReportArea.CAREER})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['report_area'] == 'career'
        assert response.data['available_count'] == 4
        assert response.data['has_available_credits'] is True

    def test_summary_empty(self, auth_client, db):
        url = reverse('purchases:credit-summary')
        response = auth_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['report_area'] is None
        assert response.data['available_count'] == 0
        assert response.data['has_available_credits'] is False


@pytest.mark.django_db
class TestCreditHistory:
    """Tests for GET /api/purchases/credits/history/"""

    def test_history(self, auth_client, consumed_credit, profile_id):
        url = reverse('purchases:credit-history')
        response = auth_client.get(url, {'profile': str(profile_id)})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['id'] == str(consumed_credit.id)
        assert response.data[0]['user_profile_id'] == str(profile_id)

    def test_history_requires_profile(self, auth_client):
        url = reverse('purchases:credit-history')
        response = auth_client.get(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestCreditConsume:
    """Tests for POST /api/purchases/credits/{id}/consume/"""

    def test_consume_credit(self, auth_client, single_credit, profile_id):
        url = reverse('purchases:credit-consume', args=[single_credit.id])
        response = auth_client.post(url, {'profile_id': str(profile_id)}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['consumed'] is True
        assert response.data['user_profile_id'] == str(profile_id)
        assert response.data['consumed_date'] is not None

    def test_consume_twice_conflict(self, auth_client, single_credit, profile_id, other_profile_id):
        url = reverse('purchases:credit-consume', args=[single_credit.id])
        auth_client.post(url, {'profile_id': str(profile_id)}, format='json')
        response = auth_client.post(url, {'profile_id': str(other_profile_id)}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        single_credit.refresh_from_db()
        assert single_credit.user_profile_id == profile_id

    def test_consume_unknown_credit(self, auth_client, db, profile_id):
        url = reverse('purchases:credit-consume', args=[uuid.uuid4()])
        response = auth_client.post(url, {'profile_id': str(profile_id)}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_consume_requires_profile(self, auth_client, single_credit):
        url = reverse('purchases:credit-consume', args=[single_credit.id])
        response = auth_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        single_credit.refresh_from_db()
        assert single_credit.consumed is False

    def test_consume_unauthenticated(self, api_client, single_credit, profile_id):
        url = reverse('purchases:credit-consume', args=[single_credit.id])
        response = api_client.post(url, {'profile_id': str(profile_id)}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

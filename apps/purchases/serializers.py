from decimal import Decimal
from rest_framework import serializers
from .catalog import MAX_CREDITS_PER_PURCHASE
from .models import PurchaseRecord, PurchaseCredit, ReportArea


# =============================================================================
# Input Serializers
# =============================================================================

class StoreEventSerializer(serializers.Serializer):
    """
    Validate a verified store transaction delivered by the store integration.

    Fields:
        product_id (str): Store product identifier
        transaction_id (str): Store transaction identifier
        price_usd (Decimal): Price paid
        localized_price (str): Display price, e.g. '$4.99'
        currency_code (str): ISO currency code
        purchase_date (datetime): Store completion time
        credit_amount (int): Credits granted; catalog value when omitted
        report_area (str): Area the credits pay for; universal when omitted
        is_restore (bool): Event comes from a restore flow
    """

    product_id = serializers.CharField(max_length=200)
    transaction_id = serializers.CharField(max_length=100)
    price_usd = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'))
    localized_price = serializers.CharField(max_length=50)
    currency_code = serializers.CharField(min_length=3, max_length=3)
    purchase_date = serializers.DateTimeField()
    credit_amount = serializers.IntegerField(
        min_value=1,
        max_value=MAX_CREDITS_PER_PURCHASE,
        required=False
    )
    report_area = serializers.ChoiceField(
        choices=ReportArea.choices,
        default=ReportArea.UNIVERSAL
    )
    is_restore = serializers.BooleanField(default=False)

    def validate_currency_code(self, value):
        return value.upper()


class RestoreInputSerializer(serializers.Serializer):
    """
    Validate the entitlements reported by a restore-purchases request.

    Fields:
        events (list): Store events, see StoreEventSerializer
    """

    events = StoreEventSerializer(many=True, allow_empty=True)

    def validate_events(self, events):
        """Drop the per-event restore flag; every event here is a restore."""
        return [
            {key: value for key, value in event.items() if key != 'is_restore'}
            for event in events
        ]


class CreditFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for available-credit listing.

    Query Parameters:
        report_area (str): Only credits usable for this area
        profile (UUID): Profile the credit would be spent for
    """

    report_area = serializers.ChoiceField(choices=ReportArea.choices, required=False)
    profile = serializers.UUIDField(required=False)


class CreditHistoryFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for credit history.

    Query Parameters:
        profile (UUID): Profile whose spent credits are listed (required)
    """

    profile = serializers.UUIDField()


class ConsumeInputSerializer(serializers.Serializer):
    """
    Validate input for consuming a credit.

    Fields:
        profile_id (UUID): Profile the report is generated for
    """

    profile_id = serializers.UUIDField()


# =============================================================================
# Output Serializers
# =============================================================================

class PurchaseCreditSerializer(serializers.ModelSerializer):
    """Serializer for credits."""

    purchase_record = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = PurchaseCredit
        fields = [
            'id',
            'purchase_record',
            'report_area',
            'purchase_date',
            'consumed',
            'consumed_date',
            'user_profile_id',
            'transaction_id',
            'sequence',
        ]
        read_only_fields = fields


class PurchaseRecordSerializer(serializers.ModelSerializer):
    """Main serializer for purchase records."""

    credits = PurchaseCreditSerializer(many=True, read_only=True)
    is_restored = serializers.BooleanField(read_only=True)

    class Meta:
        model = PurchaseRecord
        fields = [
            'id',
            'product_id',
            'transaction_id',
            'purchase_date',
            'price_usd',
            'localized_price',
            'currency_code',
            'credit_amount',
            'restored_date',
            'is_restored',
            'credits',
            'created_at',
        ]
        read_only_fields = fields


class PurchaseRecordListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for list views."""

    available_count = serializers.SerializerMethodField()

    class Meta:
        model = PurchaseRecord
        fields = [
            'id',
            'product_id',
            'transaction_id',
            'purchase_date',
            'localized_price',
            'credit_amount',
            'available_count',
            'restored_date',
        ]
        read_only_fields = fields

    def get_available_count(self, obj):
        return len(obj.get_available_credits())


class CreditSummarySerializer(serializers.Serializer):
    """Serializer for available-credit summary."""

    report_area = serializers.CharField(allow_null=True)
    available_count = serializers.IntegerField()
    has_available_credits = serializers.BooleanField()


class RestoreResultSerializer(serializers.Serializer):
    restored_count = serializers.IntegerField()

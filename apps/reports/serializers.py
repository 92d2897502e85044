from rest_framework import serializers
from apps.purchases.models import ReportArea
from .models import GeneratedReport


REPORT_AREA_CHOICES = [
    (value, label) for value, label in ReportArea.choices
    if value != ReportArea.UNIVERSAL
]


# =============================================================================
# Input Serializers
# =============================================================================

class ReportRequestSerializer(serializers.Serializer):
    """
    Validate a report generation request.

    Fields:
        profile_id (UUID): Profile the report is for
        report_area (str): Concrete report area
    """

    profile_id = serializers.UUIDField()
    report_area = serializers.ChoiceField(choices=REPORT_AREA_CHOICES)


class ReportFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for report listing.

    Query Parameters:
        profile (UUID): Profile whose reports are listed (required)
    """

    profile = serializers.UUIDField()


# =============================================================================
# Output Serializers
# =============================================================================

class GeneratedReportSerializer(serializers.ModelSerializer):
    """Serializer for generated reports."""

    credit_transaction_id = serializers.CharField(
        source='credit.transaction_id',
        read_only=True
    )

    class Meta:
        model = GeneratedReport
        fields = [
            'id',
            'profile_id',
            'report_area',
            'content',
            'credit',
            'credit_transaction_id',
            'created_at',
        ]
        read_only_fields = fields

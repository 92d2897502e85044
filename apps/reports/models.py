from django.db import models
import uuid

from apps.purchases.models import PurchaseCredit, ReportArea


class GeneratedReport(models.Model):
    """Astrology report paid for with exactly one credit."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    profile_id = models.UUIDField(db_index=True)
    report_area = models.CharField(max_length=20, choices=ReportArea.choices)

    # summary, key_influences, detailed_analysis, recommendations
    content = models.JSONField(default=dict)

    credit = models.OneToOneField(
        PurchaseCredit,
        on_delete=models.PROTECT,
        related_name='report'
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'generated_reports'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.get_report_area_display()} report for {self.profile_id}"

    @property
    def summary(self):
        return self.content.get('summary', '')

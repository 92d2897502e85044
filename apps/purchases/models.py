from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid

from .exceptions import ConsumptionReversalError


class ReportArea(models.TextChoices):
    GENERAL = 'general', 'General'
    CAREER = 'career', 'Career'
    RELATIONSHIPS = 'relationships', 'Relationships'
    FINANCES = 'finances', 'Finances'
    HEALTH = 'health', 'Health'
    UNIVERSAL = 'universal', 'Any area'


class PurchaseRecord(models.Model):
    """Completed store purchase that granted one or more report credits."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Store identifiers
    product_id = models.CharField(max_length=200)
    transaction_id = models.CharField(max_length=100, unique=True)

    purchase_date = models.DateTimeField()

    # Financial details
    price_usd = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    localized_price = models.CharField(max_length=50)
    currency_code = models.CharField(max_length=3, default='USD')

    credit_amount = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )

    # Set once when the entitlement came back through a restore flow
    restored_date = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'purchase_records'
        indexes = [
            models.Index(fields=['product_id', 'purchase_date'], name='record_product_date_idx'),
            models.Index(fields=['purchase_date'], name='record_purchase_date_idx'),
        ]
        ordering = ['-purchase_date', '-created_at']

    def __str__(self):
        return f"{self.product_id} ({self.transaction_id}) - {self.localized_price}"

    @property
    def is_restored(self):
        return self.restored_date is not None

    def get_available_credits(self):
        """Return unconsumed credits granted by this purchase."""
        return [c for c in self.credits.all() if not c.consumed]

    def get_consumed_credits(self):
        """Return credits from this purchase that were already spent."""
        return [c for c in self.credits.all() if c.consumed]


class PurchaseCredit(models.Model):
    """
    One consumable report-generation credit.

    Credits are not tied to a profile until they are consumed; at that
    point the consuming profile and time are stamped on the row. Consumed
    state, consumed_date and user_profile_id always move together, which
    the check constraint below enforces at the database level.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    purchase_record = models.ForeignKey(
        PurchaseRecord,
        on_delete=models.CASCADE,
        related_name='credits'
    )

    report_area = models.CharField(
        max_length=20,
        choices=ReportArea.choices,
        default=ReportArea.UNIVERSAL
    )
    purchase_date = models.DateTimeField()

    # Consumption state
    consumed = models.BooleanField(default=False)
    consumed_date = models.DateTimeField(null=True, blank=True)
    user_profile_id = models.UUIDField(null=True, blank=True)

    # Audit trail and replay protection: store transaction of the owning
    # purchase plus the 1-based position of the credit within it
    transaction_id = models.CharField(max_length=100)
    sequence = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = 'purchase_credits'
        indexes = [
            models.Index(fields=['consumed', 'purchase_date'], name='credit_consumed_date_idx'),
            models.Index(fields=['consumed', 'report_area'], name='credit_consumed_area_idx'),
            models.Index(fields=['user_profile_id', 'consumed_date'], name='credit_profile_history_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(
                        consumed=False,
                        consumed_date__isnull=True,
                        user_profile_id__isnull=True,
                    ) |
                    models.Q(
                        consumed=True,
                        consumed_date__isnull=False,
                        user_profile_id__isnull=False,
                    )
                ),
                name='credit_consumption_state_consistent',
            ),
            models.UniqueConstraint(
                fields=['transaction_id', 'sequence'],
                name='credit_transaction_sequence_unique',
            ),
        ]
        ordering = ['purchase_date', 'id']

    def __str__(self):
        state = f"used by {self.user_profile_id}" if self.consumed else "available"
        return (
            f"{self.get_report_area_display()} credit "
            f"{self.transaction_id} #{self.sequence} ({state})"
        )

    @property
    def is_available(self):
        return not self.consumed

    def save(self, *args, **kwargs):
        """Refuse to flip a consumed credit back to available."""
        if not self._state.adding and not self.consumed:
            stored = (
                PurchaseCredit.objects
                .using(kwargs.get('using') or self._state.db)
                .filter(pk=self.pk, consumed=True)
                .exists()
            )
            if stored:
                raise ConsumptionReversalError(
                    f"Credit {self.pk} is already consumed and cannot be reverted"
                )
        super().save(*args, **kwargs)

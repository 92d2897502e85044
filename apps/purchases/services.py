"""
Purchase Services Module
=========================

This module provides the credit ledger: the only code allowed to create
purchase records and credits or to mark credits as consumed.

Classes:
    LedgerService: Records store purchases, answers credit queries and
        consumes credits atomically.

Example:
    Recording a purchase and spending its credit::

        from apps.purchases.services import LedgerService
        from decimal import Decimal

        ledger = LedgerService()
        record, created = ledger.record_purchase(
            product_id='com.zorya.report_generation',
            transaction_id='2000000123456789',
            price_usd=Decimal('4.99'),
            localized_price='$4.99',
            currency_code='USD',
        )

        credit = ledger.available_credits(report_area='career')[0]
        ledger.consume(credit.id, profile_id)
"""

import logging

from django.db import DEFAULT_DB_ALIAS, IntegrityError, transaction
from django.utils import timezone

from .catalog import MAX_CREDITS_PER_PURCHASE, credits_for_product
from .exceptions import (
    CreditAlreadyConsumedError,
    CreditNotFoundError,
    DuplicateTransactionError,
    InvalidCreditAmountError,
    PurchaseRecordNotFoundError,
)
from .models import PurchaseCredit, PurchaseRecord, ReportArea

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Purchase-to-credit ledger.

    The service turns verified store transactions into PurchaseRecord rows
    with their PurchaseCredit batch, and is the single write path for
    credit consumption. It holds no state apart from the database alias it
    works against, so callers construct it and pass it where needed.

    Methods:
        record_purchase: Create a record and its credits (idempotent).
        mark_restored: Stamp a record as recovered through a restore.
        available_credits: Unconsumed credits, oldest first.
        consume: Atomically spend one credit for a profile.
        handle_store_event: Route a store notification to the ledger.
        restore_purchases: Deliver entitlements missing from the ledger.

    Example:
        Using a non-default database::

            ledger = LedgerService(using='replica_writer')
            ledger.mark_restored('2000000123456789')
    """

    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    # -------------------------------------------------------------------------
    # Recording purchases
    # -------------------------------------------------------------------------

    def record_purchase(
        self,
        *,
        product_id,
        transaction_id,
        price_usd,
        localized_price,
        currency_code,
        credit_amount=1,
        purchase_date=None,
        report_area=ReportArea.UNIVERSAL,
    ):
        """
        Record a completed store purchase and mint its credits.

        Store notifications are delivered at least once, so a transaction
        id that is already in the ledger is not an error: the existing
        record is returned with ``created=False`` and nothing is written.

        Args:
            product_id (str): Store product identifier.
            transaction_id (str): Store transaction identifier (unique).
            price_usd (Decimal): Price paid.
            localized_price (str): Price string shown to the user, e.g. '$4.99'.
            currency_code (str): ISO currency code, e.g. 'USD'.
            credit_amount (int, optional): Credits granted. Defaults to 1.
            purchase_date (datetime, optional): Store completion time.
                Defaults to now.
            report_area (str, optional): Area the credits may pay for.
                Defaults to ReportArea.UNIVERSAL.

        Returns:
            tuple: A tuple containing:
                - PurchaseRecord: The new or already existing record.
                - bool: True if the record was created by this call.

        Raises:
            InvalidCreditAmountError: If credit_amount is outside
                1..MAX_CREDITS_PER_PURCHASE.

        Note:
            Record and credits are written in one transaction. A concurrent
            delivery of the same transaction loses on the unique constraint
            and returns the winner's record.
        """
        if not 1 <= credit_amount <= MAX_CREDITS_PER_PURCHASE:
            raise InvalidCreditAmountError(
                f"Credit amount must be between 1 and {MAX_CREDITS_PER_PURCHASE}, "
                f"got {credit_amount}"
            )
        if purchase_date is None:
            purchase_date = timezone.now()

        existing = self.get_record(transaction_id)
        if existing is not None:
            self._log_replay(existing, product_id, credit_amount)
            return existing, False

        try:
            record = self._create_record(
                product_id=product_id,
                transaction_id=transaction_id,
                price_usd=price_usd,
                localized_price=localized_price,
                currency_code=currency_code,
                credit_amount=credit_amount,
                purchase_date=purchase_date,
                report_area=report_area,
            )
        except DuplicateTransactionError:
            existing = self.get_record(transaction_id)
            self._log_replay(existing, product_id, credit_amount)
            return existing, False

        logger.info(
            "Recorded purchase %s (%s): %d %s credit(s)",
            transaction_id, product_id, credit_amount, report_area,
        )
        return record, True

    def _create_record(self, *, transaction_id, credit_amount, purchase_date,
                       report_area, **fields):
        try:
            with transaction.atomic(using=self.using):
                record = PurchaseRecord.objects.using(self.using).create(
                    transaction_id=transaction_id,
                    credit_amount=credit_amount,
                    purchase_date=purchase_date,
                    **fields
                )
                PurchaseCredit.objects.using(self.using).bulk_create([
                    PurchaseCredit(
                        purchase_record=record,
                        report_area=report_area,
                        purchase_date=purchase_date,
                        transaction_id=transaction_id,
                        sequence=sequence,
                    )
                    for sequence in range(1, credit_amount + 1)
                ])
        except IntegrityError:
            raise DuplicateTransactionError(transaction_id)
        return record

    def _log_replay(self, record, product_id, credit_amount):
        if record.product_id != product_id or record.credit_amount != credit_amount:
            logger.warning(
                "Replayed transaction %s does not match stored record "
                "(stored %s x%d, received %s x%d)",
                record.transaction_id, record.product_id, record.credit_amount,
                product_id, credit_amount,
            )
        else:
            logger.info("Transaction %s already processed", record.transaction_id)

    def mark_restored(self, transaction_id):
        """
        Mark a purchase as recovered through a restore flow.

        The restored date is only set the first time; later calls leave it
        untouched. Credits are never modified.

        Args:
            transaction_id (str): Store transaction identifier.

        Returns:
            PurchaseRecord: The record with restored_date set.

        Raises:
            PurchaseRecordNotFoundError: If no record has this transaction id.
        """
        with transaction.atomic(using=self.using):
            try:
                record = (
                    PurchaseRecord.objects.using(self.using)
                    .select_for_update()
                    .get(transaction_id=transaction_id)
                )
            except PurchaseRecord.DoesNotExist:
                raise PurchaseRecordNotFoundError(
                    f"No purchase recorded for transaction {transaction_id}"
                )

            if record.restored_date is None:
                record.restored_date = timezone.now()
                record.save(update_fields=['restored_date'])
                logger.info("Marked transaction %s as restored", transaction_id)

        return record

    # -------------------------------------------------------------------------
    # Store reconciliation
    # -------------------------------------------------------------------------

    def handle_store_event(
        self,
        *,
        product_id,
        transaction_id,
        price_usd,
        localized_price,
        currency_code,
        purchase_date,
        credit_amount=None,
        report_area=ReportArea.UNIVERSAL,
        is_restore=False,
    ):
        """
        Apply one verified store transaction to the ledger.

        When the event carries no credit amount, the product catalog
        decides it. Restore events additionally stamp the record as
        restored.

        Returns:
            tuple: (PurchaseRecord, created) as from record_purchase.

        Raises:
            ProductNotFoundError: If credit_amount is omitted and the
                product is unknown.
            InvalidCreditAmountError: If credit_amount is outside
                1..MAX_CREDITS_PER_PURCHASE.
        """
        if credit_amount is None:
            credit_amount = credits_for_product(product_id)

        record, created = self.record_purchase(
            product_id=product_id,
            transaction_id=transaction_id,
            price_usd=price_usd,
            localized_price=localized_price,
            currency_code=currency_code,
            credit_amount=credit_amount,
            purchase_date=purchase_date,
            report_area=report_area,
        )
        if is_restore:
            record = self.mark_restored(transaction_id)
        return record, created

    def restore_purchases(self, events):
        """
        Deliver store entitlements that never reached the ledger.

        Events whose transaction is already recorded are skipped; the rest
        are recorded and marked as restored.

        Args:
            events (Iterable[dict]): Store events with the keyword arguments
                accepted by handle_store_event.

        Returns:
            int: Number of purchases restored.
        """
        restored_count = 0
        for event in events:
            if self.is_transaction_processed(event['transaction_id']):
                continue
            _, created = self.handle_store_event(**{**event, 'is_restore': True})
            if created:
                restored_count += 1

        logger.info("Restore completed: %d purchase(s) restored", restored_count)
        return restored_count

    # -------------------------------------------------------------------------
    # Credit queries
    # -------------------------------------------------------------------------

    def _available_queryset(self, report_area=None):
        queryset = PurchaseCredit.objects.using(self.using).filter(consumed=False)
        if report_area:
            queryset = queryset.filter(
                report_area__in=[report_area, ReportArea.UNIVERSAL]
            )
        return queryset

    def available_credits(self, profile_id=None, report_area=None):
        """
        Return unconsumed credits, oldest purchase first.

        Args:
            profile_id (UUID, optional): Profile the credit would be spent
                for. Unspent credits are not bound to profiles, so this does
                not narrow the result.
            report_area (str, optional): Only credits valid for this area,
                i.e. tagged with it or universal.

        Returns:
            list[PurchaseCredit]: Ordered by purchase_date, then id.
        """
        return list(
            self._available_queryset(report_area).order_by('purchase_date', 'id')
        )

    def available_credit_count(self, report_area=None):
        return self._available_queryset(report_area).count()

    def has_available_credits(self, report_area=None):
        return self._available_queryset(report_area).exists()

    def credit_history(self, profile_id):
        """Credits consumed for a profile, most recent first."""
        return list(
            PurchaseCredit.objects.using(self.using)
            .filter(consumed=True, user_profile_id=profile_id)
            .order_by('-consumed_date', 'id')
        )

    def all_credits(self):
        return list(
            PurchaseCredit.objects.using(self.using)
            .order_by('-purchase_date', 'id')
        )

    def get_record(self, transaction_id):
        """Return the record for a transaction id, or None."""
        return (
            PurchaseRecord.objects.using(self.using)
            .filter(transaction_id=transaction_id)
            .first()
        )

    def is_transaction_processed(self, transaction_id):
        return (
            PurchaseRecord.objects.using(self.using)
            .filter(transaction_id=transaction_id)
            .exists()
        )

    # -------------------------------------------------------------------------
    # Consumption
    # -------------------------------------------------------------------------

    def consume(self, credit_id, profile_id):
        """
        Spend a credit for a profile.

        The availability check and the state change are a single
        conditional UPDATE, so of two concurrent calls for the same credit
        exactly one succeeds.

        Args:
            credit_id (UUID): Credit to spend.
            profile_id (UUID): Profile the report is generated for.

        Returns:
            PurchaseCredit: The consumed credit.

        Raises:
            ValueError: If profile_id is missing.
            CreditNotFoundError: If the credit does not exist.
            CreditAlreadyConsumedError: If the credit was already spent.
        """
        if profile_id is None:
            raise ValueError("A profile id is required to consume a credit")

        credits = PurchaseCredit.objects.using(self.using)
        with transaction.atomic(using=self.using):
            updated = credits.filter(id=credit_id, consumed=False).update(
                consumed=True,
                consumed_date=timezone.now(),
                user_profile_id=profile_id,
            )
            if not updated:
                if credits.filter(id=credit_id).exists():
                    logger.info("Credit %s was already consumed", credit_id)
                    raise CreditAlreadyConsumedError(
                        f"Credit {credit_id} has already been consumed"
                    )
                raise CreditNotFoundError(f"Credit {credit_id} not found")

            credit = credits.get(id=credit_id)

        logger.info("Consumed credit %s for profile %s", credit_id, profile_id)
        return credit

"""
Report Services Module
======================

Generates paid reports: one credit from the ledger is spent per report.

Classes:
    ReportGenerationService: Selects and consumes a credit, then runs the
        configured generator and stores the result.

Example:
    Generating a career report::

        from apps.reports.services import ReportGenerationService

        service = ReportGenerationService()
        report = service.generate_report(profile_id, 'career')
"""

import logging

from django.conf import settings
from django.db import DatabaseError, transaction

from apps.purchases.exceptions import (
    CreditAlreadyConsumedError,
    CreditNotFoundError,
    InsufficientCreditsError,
)
from apps.purchases.models import ReportArea
from apps.purchases.services import LedgerService
from .exceptions import InvalidReportAreaError, ReportGenerationError
from .generators import get_report_generator
from .models import GeneratedReport

logger = logging.getLogger(__name__)


class ReportGenerationService:
    """
    Spends credits to generate reports.

    The ledger and the generator are injected; defaults are a LedgerService
    on the default database and the REPORTS_GENERATOR class.

    Methods:
        generate_report: Consume one eligible credit and store a report.
        reports_for_profile: Reports generated for a profile, newest first.
    """

    def __init__(self, ledger=None, generator=None, max_attempts=None):
        self.ledger = ledger or LedgerService()
        self.generator = generator or get_report_generator()
        self.max_attempts = max_attempts or settings.REPORTS_MAX_CREDIT_ATTEMPTS

    def generate_report(self, profile_id, report_area):
        """
        Generate a report for a profile, paying with one credit.

        The oldest credit valid for the area is consumed first. When another
        request spends that credit in the meantime, the next one is tried,
        up to max_attempts times.

        Args:
            profile_id (UUID): Profile the report is for.
            report_area (str): Concrete ReportArea (not universal).

        Returns:
            GeneratedReport: The stored report.

        Raises:
            InvalidReportAreaError: If report_area is the universal marker.
            InsufficientCreditsError: If no credit could be spent for the area.
            ReportGenerationError: If the generator failed or the report
                could not be stored. The credit stays consumed.
        """
        if report_area == ReportArea.UNIVERSAL:
            raise InvalidReportAreaError("Reports are generated for a specific area")

        credit = self._spend_credit(profile_id, report_area)

        try:
            content = self.generator.generate(profile_id, report_area)
        except ReportGenerationError:
            logger.error(
                "Report generation failed for profile %s (%s); credit %s stays consumed",
                profile_id, report_area, credit.id,
            )
            raise
        except Exception as exc:
            logger.exception(
                "Report generator crashed for profile %s (%s); credit %s stays consumed",
                profile_id, report_area, credit.id,
            )
            raise ReportGenerationError(
                f"Report generator failed for {report_area} report"
            ) from exc

        try:
            with transaction.atomic(using=self.ledger.using):
                report = GeneratedReport.objects.using(self.ledger.using).create(
                    profile_id=profile_id,
                    report_area=report_area,
                    content=content,
                    credit=credit,
                )
        except DatabaseError as exc:
            logger.exception(
                "Could not store %s report for profile %s; credit %s stays consumed",
                report_area, profile_id, credit.id,
            )
            raise ReportGenerationError(
                f"Generated {report_area} report could not be stored"
            ) from exc

        logger.info(
            "Generated %s report %s for profile %s with credit %s",
            report_area, report.id, profile_id, credit.id,
        )
        return report

    def _spend_credit(self, profile_id, report_area):
        for attempt in range(1, self.max_attempts + 1):
            candidates = self.ledger.available_credits(
                profile_id=profile_id,
                report_area=report_area,
            )
            if not candidates:
                break

            credit = candidates[0]
            try:
                return self.ledger.consume(credit.id, profile_id)
            except (CreditAlreadyConsumedError, CreditNotFoundError):
                logger.info(
                    "Credit %s taken before it could be spent (attempt %d/%d)",
                    credit.id, attempt, self.max_attempts,
                )

        logger.info("No %s credit available for profile %s", report_area, profile_id)
        raise InsufficientCreditsError(
            f"No credits available for {report_area} reports"
        )

    def reports_for_profile(self, profile_id):
        return list(
            GeneratedReport.objects.using(self.ledger.using)
            .filter(profile_id=profile_id)
            .select_related('credit')
        )

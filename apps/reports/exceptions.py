"""
Domain exceptions for reports app.

Exception Hierarchy:
    ReportsServiceError (base)
    ├── ReportGenerationError
    └── InvalidReportAreaError

Running out of credits is a ledger outcome and is raised as
apps.purchases.exceptions.InsufficientCreditsError.
"""
from rest_framework.exceptions import APIException


class ReportsServiceError(Exception):
    """Base exception for report errors."""
    pass


class ReportGenerationError(ReportsServiceError):
    """Raised when the report generator fails after a credit was spent."""
    pass


class InvalidReportAreaError(ReportsServiceError):
    """Raised when a report is requested for the universal marker."""
    pass


# =============================================================================
# HTTP exceptions
# =============================================================================

class ReportGenerationAPIError(APIException):
    """Report generator unavailable."""
    status_code = 503
    default_detail = 'Report generation is temporarily unavailable. Please try again shortly.'
    default_code = 'report_generation_failed'

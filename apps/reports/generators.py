"""
Report generators.

A generator turns a profile and report area into report content. It is
called only after a credit has been spent, and signals failure by raising
ReportGenerationError.

The active generator is configured with the REPORTS_GENERATOR setting (a
dotted path to a class constructed without arguments).
"""

from django.conf import settings
from django.utils.module_loading import import_string

from apps.purchases.models import ReportArea


SHARED_INFLUENCES = [
    'First House (Self): Aquarius 12° - inventive instincts help you stand out.',
    'Tenth House (Legacy): Scorpio 18° - transformation through focused effort powers milestones.',
    'Jupiter trine Moon - faith and intuition collaborate, sustaining momentum during transitions.',
    'Venus sextile Saturn - disciplined affection turns long-term commitments into a stabilizing force.',
]

AREA_ANALYSIS = {
    ReportArea.FINANCES: (
        'Your second house is nourished by earthy sensibilities, encouraging practical '
        'financial plans and patient accumulation.'
    ),
    ReportArea.CAREER: (
        'A focused tenth house invites bold yet calculated career moves. The Scorpio '
        'Midheaven thrives on meaningful impact.'
    ),
    ReportArea.RELATIONSHIPS: (
        'Relationships flourish when curiosity meets emotional steadiness. Venus '
        'harmonizing Saturn invites partners who respect structure and promises.'
    ),
    ReportArea.HEALTH: (
        'Wellness thrives on rhythmic routines backed by meaningful motivation. '
        'Consistency is your greatest ally.'
    ),
    ReportArea.GENERAL: (
        'This chart tells the story of an innovator anchored by emotional intelligence.'
    ),
}

AREA_RECOMMENDATIONS = {
    ReportArea.FINANCES: [
        'Review spending weekly to keep intentions aligned with resources.',
        'Set quarterly milestones for savings or debt reduction.',
    ],
    ReportArea.CAREER: [
        'Highlight transformation stories in your portfolio or resume.',
        'Seek mentorship with leaders known for strategic reinvention.',
    ],
    ReportArea.RELATIONSHIPS: [
        'Plan experiences that combine novelty with meaningful dialogue.',
        'Schedule regular check-ins to celebrate progress together.',
    ],
    ReportArea.HEALTH: [
        'Adopt a morning ritual that activates body and creativity.',
        'Block out digital detox evenings to reset energy and focus.',
    ],
    ReportArea.GENERAL: [
        'Trust the steady rhythms that keep you nourished.',
        'Let curiosity guide one bold pivot this season.',
    ],
}


class HardcodedReportGenerator:
    """Deterministic placeholder report per area, used until an AI backend is wired in."""

    def generate(self, profile_id, report_area):
        area = ReportArea(report_area)
        return {
            'summary': (
                f"Your {area.label.lower()} outlook blends steady earth-water "
                f"harmonies with confident fire support."
            ),
            'key_influences': list(SHARED_INFLUENCES),
            'detailed_analysis': AREA_ANALYSIS[area],
            'recommendations': list(AREA_RECOMMENDATIONS[area]),
        }


def get_report_generator():
    """Instantiate the generator named by REPORTS_GENERATOR."""
    return import_string(settings.REPORTS_GENERATOR)()

"""
Reports App - Paid Report Generation

Spends one credit from the purchase ledger per generated astrology report.

Key Features:
- Oldest eligible credit selected first, universal credits included
- Re-selection when another request spends the chosen credit first
- Pluggable report generator (REPORTS_GENERATOR setting)

Architecture:
- Models: GeneratedReport
- Services: ReportGenerationService
- Generators: HardcodedReportGenerator
"""

__version__ = '1.0.0'

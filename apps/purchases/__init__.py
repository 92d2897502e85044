"""
Purchases App - Report Credit Ledger

This app turns verified store transactions into consumable report credits
and is the only place allowed to spend them.

Key Features:
- Idempotent recording of store transactions (at-least-once delivery)
- Credit packs with per-credit unique transaction identifiers
- Restore flow for entitlements that never reached the ledger
- Atomic, race-free credit consumption stamped with the consuming profile
- Ledger audit management command

Architecture:
- Models: PurchaseRecord, PurchaseCredit, ReportArea
- Services: LedgerService
- Catalog: PurchaseProduct and credit amounts
- Views: store integration endpoints and credit ViewSet
- Exceptions: Domain exception hierarchy plus HTTP mappings
"""

__version__ = '1.0.0'

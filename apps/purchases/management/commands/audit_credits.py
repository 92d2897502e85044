"""
Management command to audit the credit ledger.

Checks that every purchase record owns exactly credit_amount credits and
that each credit's consumed flag, consumed date and profile agree.

Usage:
    python manage.py audit_credits
    python manage.py audit_credits --verbose
"""

from django.core.management.base import BaseCommand, CommandError
from django.db.models import Count, Q
from apps.purchases.models import PurchaseRecord, PurchaseCredit


class Command(BaseCommand):
    help = 'Report purchase records and credits that break ledger invariants'

    def add_arguments(self, parser):
        parser.add_argument(
            '--verbose',
            action='store_true',
            help='List every record and credit checked',
        )

    def handle(self, *args, **options):
        verbose = options['verbose']
        problems = []

        records = PurchaseRecord.objects.annotate(minted=Count('credits'))
        for record in records:
            if verbose:
                self.stdout.write(
                    f'  - {record.transaction_id} | {record.product_id} | '
                    f'{record.minted}/{record.credit_amount} credit(s)'
                )
            if record.minted != record.credit_amount:
                problems.append(
                    f'Record {record.transaction_id} grants {record.credit_amount} '
                    f'credit(s) but owns {record.minted}'
                )

        inconsistent = PurchaseCredit.objects.filter(
            Q(consumed=True, consumed_date__isnull=True) |
            Q(consumed=True, user_profile_id__isnull=True) |
            Q(consumed=False, consumed_date__isnull=False) |
            Q(consumed=False, user_profile_id__isnull=False)
        )
        for credit in inconsistent:
            problems.append(
                f'Credit {credit.transaction_id} #{credit.sequence} has inconsistent '
                f'consumption state '
                f'(consumed={credit.consumed}, consumed_date={credit.consumed_date}, '
                f'profile={credit.user_profile_id})'
            )

        total = PurchaseCredit.objects.count()
        available = PurchaseCredit.objects.filter(consumed=False).count()
        self.stdout.write(
            f'\nChecked {records.count()} purchase(s) and {total} credit(s); '
            f'{available} available.\n'
        )

        if problems:
            for problem in problems:
                self.stdout.write(self.style.ERROR(f'  ✗ {problem}'))
            raise CommandError(f'{len(problems)} ledger problem(s) found')

        self.stdout.write(self.style.SUCCESS('✓ Ledger is consistent.'))

from django.core.management.base import BaseCommand
from django.db import transaction

from shopledger.parties.services import customer_ledger, supplier_ledger


class Command(BaseCommand):
    help = 'Recomputes customer and supplier balances from their ledger lines'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report drift without saving changes',
        )
        parser.add_argument(
            '--party',
            choices=['customers', 'suppliers'],
            help='Only repair one kind of party',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE: No changes will be saved."))

        ledgers = {'customers': customer_ledger, 'suppliers': supplier_ledger}
        if options['party']:
            ledgers = {options['party']: ledgers[options['party']]}

        repaired = 0
        with transaction.atomic():
            for kind, ledger in ledgers.items():
                drifted = ledger.verify_balances()
                self.stdout.write(f"Checked {ledger.party_model.objects.count()} {kind}: {len(drifted)} with drift")

                for party, stored, expected in drifted:
                    self.stdout.write(self.style.NOTICE(f"  - {party.name} ({party.id}): {stored} -> {expected}"))
                    # Shift by the difference so the update stays an F() increment
                    ledger.adjust_balance(party.id, expected - stored)
                    repaired += 1

            if dry_run:
                self.stdout.write(self.style.WARNING(f"\nDry run complete. {repaired} balance(s) would change. Rolling back."))
                transaction.set_rollback(True)
            else:
                self.stdout.write(self.style.SUCCESS(f"\nBalance repair complete: {repaired} balance(s) updated."))

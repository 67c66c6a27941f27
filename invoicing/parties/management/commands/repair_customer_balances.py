from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import Sum
from decimal import Decimal
from invoicing.parties.models import Customer


class Command(BaseCommand):
    help = 'Recompute customer balances from the balance due of their non-cancelled invoices'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Perform a dry run without saving changes',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE: No changes will be saved."))

        customers = Customer.objects.all()
        self.stdout.write(f"Starting balance repair for {customers.count()} customers...")

        fixed = 0
        with transaction.atomic():
            for customer in customers.select_for_update():
                expected = customer.invoices.exclude(status='cancelled').aggregate(
                    total=Sum('balance_due')
                )['total'] or Decimal('0.00')

                if customer.current_balance != expected:
                    fixed += 1
                    self.stdout.write(self.style.SUCCESS(
                        f"  - {customer.name} (ID: {customer.id}): {customer.current_balance} -> {expected}"
                    ))
                    if not dry_run:
                        customer.current_balance = expected
                        customer.save(update_fields=['current_balance', 'updated_at'])

            if dry_run:
                transaction.set_rollback(True)

        self.stdout.write(self.style.SUCCESS(f"\nBalance repair complete: {fixed} customer(s) corrected."))

"""
Management command that expires stale quotations and proformas and flags
unpaid invoices past their due date as overdue.
"""
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from invoicing.sales.models import Quotation, ProformaInvoice, Invoice


class Command(BaseCommand):
    help = 'Expire quotations and proformas past validity and mark unpaid invoices past due as overdue'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would change without saving',
        )
        parser.add_argument(
            '--company',
            type=int,
            help='Only process documents of this company id',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        company_id = options.get('company')
        today = timezone.localdate()

        quotations = Quotation.objects.filter(status__in=['draft', 'sent', 'accepted'], valid_until__lte=today)
        proformas = ProformaInvoice.objects.filter(status__in=['draft', 'sent'], valid_until__lte=today)
        invoices = Invoice.objects.filter(status='sent', due_date__lt=today, balance_due__gt=0)
        if company_id:
            quotations = quotations.filter(company_id=company_id)
            proformas = proformas.filter(company_id=company_id)
            invoices = invoices.filter(company_id=company_id)

        if dry_run:
            self.stdout.write(self.style.WARNING('DRY RUN MODE: No changes will be saved.'))
            self.stdout.write(f"Quotations to expire: {quotations.count()}")
            self.stdout.write(f"Proforma invoices to expire: {proformas.count()}")
            self.stdout.write(f"Invoices to mark overdue: {invoices.count()}")
            return

        now = timezone.now()
        with transaction.atomic():
            expired_quotations = quotations.update(status='expired', updated_at=now)
            expired_proformas = proformas.update(status='expired', updated_at=now)
            overdue_invoices = invoices.update(status='overdue', updated_at=now)

        self.stdout.write(self.style.SUCCESS(
            f"Expired {expired_quotations} quotation(s) and {expired_proformas} proforma(s); "
            f"marked {overdue_invoices} invoice(s) overdue."
        ))

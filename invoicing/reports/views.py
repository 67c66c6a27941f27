import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum, Count, Avg, F, DecimalField
from django.shortcuts import get_object_or_404
from django.utils import timezone
from datetime import datetime, timedelta
from decimal import Decimal

from invoicing.catalog.models import Product
from invoicing.core.models import AuditLog
from invoicing.core.utils import get_request_company
from invoicing.parties.models import Customer
from invoicing.sales.models import Invoice, InvoiceItem, Payment

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')
AGING_BUCKETS = ['current', 'days30', 'days60', 'days90', 'over90']


def parse_date(value, default):
    if not value:
        return default
    return datetime.strptime(value, '%Y-%m-%d').date()


def aging_bucket(due_date, as_of):
    """Bucket of an open balance by days past its due date"""
    days = (as_of - due_date).days
    if days <= 0:
        return 'current'
    if days <= 30:
        return 'days30'
    if days <= 60:
        return 'days60'
    if days <= 90:
        return 'days90'
    return 'over90'


def _sum(queryset, field):
    return queryset.aggregate(total=Sum(field, output_field=DecimalField()))['total'] or ZERO


def _invalid_date():
    return Response({'error': 'Dates must use the YYYY-MM-DD format'}, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_metrics(request):
    """Headline figures for the dashboard"""
    company = get_request_company(request)
    today = timezone.localdate()

    invoices = Invoice.objects.filter(company=company).exclude(status='cancelled')
    payments = Payment.objects.filter(company=company)

    total_revenue = _sum(payments, 'amount')
    outstanding_invoices = _sum(invoices.filter(balance_due__gt=0), 'balance_due')
    recent_payments = _sum(payments.filter(payment_date__gte=today - timedelta(days=30)), 'amount')
    low_stock_alerts = Product.objects.filter(
        company=company, is_active=True, track_inventory=True, current_stock__lte=F('min_stock')
    ).count()

    trend_start = today - timedelta(days=6)
    daily_totals = {
        row['issue_date']: row['amount']
        for row in invoices.filter(issue_date__gte=trend_start, issue_date__lte=today)
        .values('issue_date')
        .annotate(amount=Sum('total', output_field=DecimalField()))
    }
    sales_trend = []
    for offset in range(7):
        day = trend_start + timedelta(days=offset)
        sales_trend.append({'date': day.isoformat(), 'amount': float(daily_totals.get(day, ZERO))})

    top_products = (
        InvoiceItem.objects.filter(invoice__in=invoices)
        .values('product_id', 'product__name')
        .annotate(sales=Sum('line_total', output_field=DecimalField()), quantity=Sum('quantity'))
        .order_by('-sales')[:5]
    )

    recent_activities = AuditLog.objects.select_related('user').filter(company=company).order_by('-created_at', '-id')[:10]

    return Response({
        'total_revenue': float(total_revenue),
        'outstanding_invoices': float(outstanding_invoices),
        'low_stock_alerts': low_stock_alerts,
        'recent_payments': float(recent_payments),
        'sales_trend': sales_trend,
        'top_products': [
            {
                'product_id': row['product_id'],
                'name': row['product__name'],
                'sales': float(row['sales'] or ZERO),
                'quantity': float(row['quantity'] or 0),
            }
            for row in top_products
        ],
        'recent_activities': [
            {
                'id': log.id,
                'type': log.model_name,
                'action': log.action,
                'description': f"{log.get_action_display()} {log.object_reference or log.object_id}",
                'user': log.user.username if log.user else None,
                'timestamp': log.created_at,
            }
            for log in recent_activities
        ],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sales_summary(request):
    """Sales summary report"""
    company = get_request_company(request)
    today = timezone.localdate()
    try:
        date_from = parse_date(request.query_params.get('date_from'), today - timedelta(days=30))
        date_to = parse_date(request.query_params.get('date_to'), today)
    except ValueError:
        return _invalid_date()

    invoices = Invoice.objects.filter(
        company=company,
        issue_date__gte=date_from,
        issue_date__lte=date_to,
    ).exclude(status='cancelled')

    total_sales = _sum(invoices, 'total')
    avg_order_value = invoices.aggregate(avg=Avg('total', output_field=DecimalField()))['avg'] or ZERO

    daily_sales = invoices.values('issue_date').annotate(
        total=Sum('total', output_field=DecimalField()),
        count=Count('id'),
    ).order_by('issue_date')

    return Response({
        'period': {
            'from': date_from.isoformat(),
            'to': date_to.isoformat()
        },
        'summary': {
            'total_sales': float(total_sales),
            'total_vat': float(_sum(invoices, 'vat_amount')),
            'total_paid': float(_sum(invoices, 'amount_paid')),
            'total_outstanding': float(_sum(invoices, 'balance_due')),
            'total_invoices': invoices.count(),
            'avg_order_value': float(avg_order_value),
        },
        'daily_breakdown': [
            {'date': row['issue_date'].isoformat(), 'total': float(row['total']), 'count': row['count']}
            for row in daily_sales
        ],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def aged_receivables(request):
    """Open invoice balances per customer bucketed by days past due"""
    company = get_request_company(request)
    try:
        as_of = parse_date(request.query_params.get('as_of'), timezone.localdate())
    except ValueError:
        return _invalid_date()

    open_invoices = Invoice.objects.select_related('customer').filter(
        company=company, balance_due__gt=0
    ).exclude(status='cancelled').order_by('customer__name', 'due_date')

    rows = {}
    totals = {bucket: ZERO for bucket in AGING_BUCKETS + ['total']}
    for invoice in open_invoices:
        row = rows.get(invoice.customer_id)
        if row is None:
            row = {'customer_id': invoice.customer_id, 'customer_name': invoice.customer.name}
            row.update({bucket: ZERO for bucket in AGING_BUCKETS + ['total']})
            rows[invoice.customer_id] = row
        bucket = aging_bucket(invoice.due_date, as_of)
        row[bucket] += invoice.balance_due
        row['total'] += invoice.balance_due
        totals[bucket] += invoice.balance_due
        totals['total'] += invoice.balance_due

    def as_floats(row):
        return {key: float(value) if isinstance(value, Decimal) else value for key, value in row.items()}

    return Response({
        'as_of': as_of.isoformat(),
        'customers': [as_floats(row) for row in rows.values()],
        'totals': as_floats(totals),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def statement_of_account(request):
    """Invoices, payments and running balance of one customer"""
    company = get_request_company(request)
    customer_id = request.query_params.get('customer', None)
    if not customer_id:
        return Response({'error': 'customer is required'}, status=status.HTTP_400_BAD_REQUEST)
    customer = get_object_or_404(Customer, pk=customer_id, company=company)

    today = timezone.localdate()
    try:
        start_date = parse_date(request.query_params.get('start_date'), None)
        end_date = parse_date(request.query_params.get('end_date'), today)
    except ValueError:
        return _invalid_date()

    invoices = Invoice.objects.filter(company=company, customer=customer).exclude(status='cancelled')
    payments = (
        Payment.objects.filter(company=company, customer=customer)
        .exclude(invoice__status='cancelled')
        .select_related('invoice')
    )

    opening_balance = ZERO
    if start_date:
        opening_balance = (
            _sum(invoices.filter(issue_date__lt=start_date), 'total') -
            _sum(payments.filter(payment_date__lt=start_date), 'amount')
        )
        invoices = invoices.filter(issue_date__gte=start_date)
        payments = payments.filter(payment_date__gte=start_date)
    invoices = invoices.filter(issue_date__lte=end_date).order_by('issue_date', 'id')
    payments = payments.filter(payment_date__lte=end_date).order_by('payment_date', 'id')

    aging = {bucket: ZERO for bucket in AGING_BUCKETS}
    invoice_rows = []
    for invoice in invoices:
        if invoice.balance_due <= 0:
            row_status = 'paid'
        elif invoice.due_date < today:
            row_status = 'overdue'
        else:
            row_status = 'current'
        if invoice.balance_due > 0:
            aging[aging_bucket(invoice.due_date, today)] += invoice.balance_due
        invoice_rows.append({
            'id': invoice.id,
            'date': invoice.issue_date.isoformat(),
            'invoice': invoice.invoice_number,
            'due_date': invoice.due_date.isoformat(),
            'original_amount': float(invoice.total),
            'paid_amount': float(invoice.amount_paid),
            'balance': float(invoice.balance_due),
            'status': row_status,
        })

    entries = [
        (invoice.issue_date, 0, invoice.id, 'invoice', invoice.invoice_number, invoice.total, ZERO)
        for invoice in invoices
    ] + [
        (payment.payment_date, 1, payment.id, 'payment', payment.reference or payment.invoice.invoice_number, ZERO, payment.amount)
        for payment in payments
    ]
    entries.sort(key=lambda entry: entry[:3])

    running = opening_balance
    ledger = []
    for entry_date, _, _, entry_type, reference, debit, credit in entries:
        running += debit - credit
        ledger.append({
            'date': entry_date.isoformat(),
            'type': entry_type,
            'reference': reference,
            'debit': float(debit),
            'credit': float(credit),
            'balance': float(running),
        })

    return Response({
        'customer': {
            'id': customer.id,
            'name': customer.name,
            'email': customer.email,
            'phone': customer.phone,
            'address': customer.address,
        },
        'period': {
            'from': start_date.isoformat() if start_date else None,
            'to': end_date.isoformat(),
        },
        'opening_balance': float(opening_balance),
        'closing_balance': float(running),
        'invoices': invoice_rows,
        'payments': [
            {
                'id': payment.id,
                'date': payment.payment_date.isoformat(),
                'invoice': payment.invoice.invoice_number,
                'amount': float(payment.amount),
                'method': payment.method,
                'reference': payment.reference,
            }
            for payment in payments
        ],
        'ledger': ledger,
        'aging': {bucket: float(value) for bucket, value in aging.items()},
    })

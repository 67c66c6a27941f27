from django.urls import path
from . import views

urlpatterns = [
    path('dashboard/metrics/', views.dashboard_metrics, name='dashboard-metrics'),
    path('reports/sales-summary/', views.sales_summary, name='sales-summary'),
    path('reports/aged-receivables/', views.aged_receivables, name='aged-receivables'),
    path('reports/statement-of-account/', views.statement_of_account, name='statement-of-account'),
]

from django.urls import path
from . import views

urlpatterns = [
    path('reports/dashboard/', views.dashboard, name='report-dashboard'),
    path('reports/daily-sales/', views.daily_sales, name='report-daily-sales'),
    path('reports/monthly-sales/', views.monthly_sales, name='report-monthly-sales'),
    path('reports/low-stock/', views.low_stock, name='report-low-stock'),
    path('reports/audits/', views.approved_audits, name='report-approved-audits'),
    path('reports/audits/<uuid:pk>/differences/', views.audit_differences, name='report-audit-differences'),
]

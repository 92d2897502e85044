from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    # GET    /api/reports/?profile=<uuid>   - Reports for a profile
    # POST   /api/reports/                  - Spend a credit, generate report
    path('', views.reports, name='report-list'),
]

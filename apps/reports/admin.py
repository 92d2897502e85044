from django.contrib import admin
from .models import GeneratedReport


@admin.register(GeneratedReport)
class GeneratedReportAdmin(admin.ModelAdmin):
    """Read-only admin for generated reports."""

    list_display = [
        'id',
        'profile_id',
        'report_area',
        'get_credit_display',
        'created_at',
    ]
    list_filter = ['report_area', 'created_at']
    search_fields = ['profile_id', 'credit__transaction_id']
    readonly_fields = [
        'profile_id',
        'report_area',
        'content',
        'credit',
        'created_at',
    ]
    ordering = ['-created_at']

    def get_credit_display(self, obj):
        return obj.credit.transaction_id
    get_credit_display.short_description = 'Credit'

    def has_add_permission(self, request):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('credit')

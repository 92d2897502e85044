# ==========================================
# apps/purchases/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import PurchaseRecord, PurchaseCredit
from .services import LedgerService


BADGE_STYLE = (
    '<span style="background: {}; color: {}; padding: 3px 8px; '
    'border-radius: 10px; font-size: 11px;">{}</span>'
)

LEDGER_FIELDS = [
    'purchase_record',
    'report_area',
    'purchase_date',
    'consumed',
    'consumed_date',
    'user_profile_id',
    'transaction_id',
    'sequence',
]


def consumed_badge(obj):
    if obj.consumed:
        return format_html(BADGE_STYLE, '#A47449', 'white', 'Used')
    return format_html(BADGE_STYLE, '#6B8E5E', 'white', 'Available')


class PurchaseCreditInline(admin.TabularInline):
    """Inline admin for credits within a purchase."""
    model = PurchaseCredit
    extra = 0
    fields = [
        'transaction_id',
        'sequence',
        'report_area',
        'status_badge',
        'consumed_date',
        'user_profile_id',
    ]
    readonly_fields = fields

    def status_badge(self, obj):
        """Display consumption state as colored badge."""
        return consumed_badge(obj)
    status_badge.short_description = 'Status'

    def has_add_permission(self, request, obj=None):
        """Credits are minted by the ledger only."""
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PurchaseRecord)
class PurchaseRecordAdmin(admin.ModelAdmin):
    """
    Admin interface for Purchase Records.

    Records are read-only here: they come from the store integration and
    their credits from the ledger. Deleting a record deletes its credits.
    """

    list_display = [
        'transaction_id',
        'product_id',
        'localized_price',
        'credit_amount',
        'get_available_display',
        'restored_badge',
        'purchase_date',
    ]

    list_filter = [
        'product_id',
        'currency_code',
        'purchase_date',
    ]

    search_fields = [
        'transaction_id',
        'product_id',
        'credits__transaction_id',
    ]

    readonly_fields = [
        'product_id',
        'transaction_id',
        'purchase_date',
        'price_usd',
        'localized_price',
        'currency_code',
        'credit_amount',
        'restored_date',
        'created_at',
    ]

    inlines = [PurchaseCreditInline]
    date_hierarchy = 'purchase_date'
    ordering = ['-purchase_date', '-created_at']

    fieldsets = (
        ('Store Transaction', {
            'fields': (
                'product_id',
                'transaction_id',
                'purchase_date',
                'restored_date',
            )
        }),
        ('Financial Details', {
            'fields': (
                'price_usd',
                'localized_price',
                'currency_code',
                'credit_amount',
            )
        }),
        ('Metadata', {
            'fields': ('created_at',),
            'classes': ('collapse',),
        }),
    )

    actions = ['mark_restored']

    def get_available_display(self, obj):
        """Display available/total credits."""
        return f"{len(obj.get_available_credits())} / {obj.credit_amount}"
    get_available_display.short_description = 'Available'

    def restored_badge(self, obj):
        if obj.is_restored:
            return format_html(BADGE_STYLE, '#E5C49A', '#2C1810', 'Restored')
        return ''
    restored_badge.short_description = 'Restored'
    restored_badge.admin_order_field = 'restored_date'

    @admin.action(description='Mark selected purchases as restored')
    def mark_restored(self, request, queryset):
        ledger = LedgerService()
        for record in queryset:
            ledger.mark_restored(record.transaction_id)
        self.message_user(request, f'Marked {queryset.count()} purchase(s) as restored.')

    def has_add_permission(self, request):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.prefetch_related('credits')


@admin.register(PurchaseCredit)
class PurchaseCreditAdmin(admin.ModelAdmin):
    """
    Admin interface for credits.

    Every ledger field is read-only; consumption happens through
    LedgerService.consume only.
    """

    list_display = [
        'transaction_id',
        'sequence',
        'report_area',
        'status_badge',
        'purchase_date',
        'consumed_date',
        'user_profile_id',
    ]

    list_filter = [
        'consumed',
        'report_area',
        'purchase_date',
    ]

    search_fields = [
        'transaction_id',
        'purchase_record__transaction_id',
        'user_profile_id',
    ]

    readonly_fields = LEDGER_FIELDS
    fields = LEDGER_FIELDS
    ordering = ['purchase_date']

    def status_badge(self, obj):
        """Display consumption state as colored badge."""
        return consumed_badge(obj)
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'consumed'

    def has_add_permission(self, request):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('purchase_record')

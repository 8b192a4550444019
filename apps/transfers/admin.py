"""
Django Admin configuration for Transfers app.
Status changes go through the ledger so the history stays complete.
"""

from django.contrib import admin, messages

from apps.transfers.application.factory import get_transfer_ledger
from apps.transfers.domain.exceptions import IllegalTransition
from apps.transfers.domain.models import TransferStatus, is_terminal
from apps.transfers.infrastructure.persistence.models import (
    CustomerProfile,
    Recipient,
    Transfer,
    TransferStatusHistory,
)


class TransferStatusHistoryInline(admin.TabularInline):
    model = TransferStatusHistory
    fields = ('sequence', 'status', 'notes', 'created_at')
    readonly_fields = fields
    ordering = ('sequence',)
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Transfer)
class TransferAdmin(admin.ModelAdmin):
    """Read-mostly view of transfers. Status is changed only through actions."""

    list_display = (
        'reference_number',
        'user',
        'get_amounts',
        'status',
        'get_is_final',
        'payment_method',
        'created_at',
    )
    list_filter = ('status', 'payment_method', 'delivery_method', 'receive_currency')
    search_fields = ('reference_number', 'user__username', 'recipient__last_name')
    readonly_fields = [field.name for field in Transfer._meta.fields]
    inlines = [TransferStatusHistoryInline]
    actions = ['mark_completed', 'mark_failed', 'mark_cancelled']

    def get_amounts(self, obj):
        return f"{obj.send_amount} {obj.send_currency} → {obj.receive_amount} {obj.receive_currency}"
    get_amounts.short_description = 'Amounts'

    @admin.display(boolean=True, description='Final')
    def get_is_final(self, obj):
        return is_terminal(obj.transfer_status)

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def _transition(self, request, queryset, new_status: TransferStatus, notes: str):
        ledger = get_transfer_ledger()
        moved = 0
        for transfer in queryset:
            try:
                ledger.transition(transfer.id, new_status, notes)
            except IllegalTransition as e:
                self.message_user(request, e.message, level=messages.WARNING)
                continue
            moved += 1
        self.message_user(request, f'{moved} transfer(s) marked {new_status.value}.')

    @admin.action(description='Mark selected transfers as completed')
    def mark_completed(self, request, queryset):
        self._transition(request, queryset, TransferStatus.COMPLETED, f'Completed by {request.user}')

    @admin.action(description='Mark selected transfers as failed')
    def mark_failed(self, request, queryset):
        self._transition(request, queryset, TransferStatus.FAILED, f'Failed by {request.user}')

    @admin.action(description='Cancel selected transfers')
    def mark_cancelled(self, request, queryset):
        self._transition(request, queryset, TransferStatus.CANCELLED, f'Cancelled by {request.user}')


@admin.register(Recipient)
class RecipientAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'owner', 'country', 'country_currency', 'delivery_method', 'is_active')
    list_filter = ('country', 'delivery_method', 'is_active')
    search_fields = ('first_name', 'last_name', 'email', 'owner__username')


@admin.register(CustomerProfile)
class CustomerProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'kyc_status', 'kyc_verified_at')
    list_filter = ('kyc_status',)
    search_fields = ('user__username', 'user__email')

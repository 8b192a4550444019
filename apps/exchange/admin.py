"""
Django Admin configuration for Exchange app.
"""

from django.contrib import admin
from django.utils import timezone
from django.utils.html import format_html

from apps.exchange.application.factory import get_exchange_rate_service
from apps.exchange.domain.exceptions import RateUnavailable
from apps.exchange.infrastructure.persistence.models import CurrencyExchangeRate


@admin.register(CurrencyExchangeRate)
class CurrencyExchangeRateAdmin(admin.ModelAdmin):
    """Admin interface for cached exchange rates."""

    list_display = (
        'get_currency_pair',
        'rate',
        'fetched_at',
        'get_freshness',
    )
    list_filter = ('base_currency', 'target_currency')
    search_fields = ('base_currency', 'target_currency')
    readonly_fields = ('id', 'fetched_at', 'created_at', 'updated_at')
    ordering = ('base_currency', 'target_currency')
    actions = ['refresh_rates']

    fieldsets = (
        ('Exchange Rate', {
            'fields': ('base_currency', 'target_currency', 'rate', 'fetched_at')
        }),
        ('Metadata', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_currency_pair(self, obj):
        """Display currency pair in format BASE/TARGET."""
        return f"{obj.base_currency}/{obj.target_currency}"
    get_currency_pair.short_description = 'Currency Pair'
    get_currency_pair.admin_order_field = 'base_currency'

    def get_freshness(self, obj):
        """Fresh while younger than the cache TTL."""
        ttl = get_exchange_rate_service().cache.ttl
        if timezone.now() - obj.fetched_at < ttl:
            return format_html('<span style="color: green; font-weight: bold;">{}</span>', '● Fresh')
        return format_html('<span style="color: orange;">{}</span>', '○ Expired')
    get_freshness.short_description = 'Freshness'

    @admin.action(description='Resolve selected rates, refetching expired ones')
    def refresh_rates(self, request, queryset):
        """Resolve the selected pairs through the rate service."""
        service = get_exchange_rate_service()
        refreshed = 0
        for row in queryset:
            try:
                result = service.get_rate(row.base_currency, row.target_currency)
            except RateUnavailable:
                continue
            if not result.stale:
                refreshed += 1
        self.message_user(request, f'{refreshed} rate(s) resolved without falling back to stale values.')

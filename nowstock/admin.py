"""
NowStock Admin.

- Product: list + edit (stand-in for the catalog)
- StockLevel: read-only (quantity only changes via MovementEngine)
- Movement: read-only audit trail
- TagRead: read-only reader log
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from nowstock.models import Movement, Product, StockLevel, TagRead


class ReadOnlyAdmin(admin.ModelAdmin):
    """No add / change / delete from the admin."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'tenant_id', 'rfid_tag', 'minimum_quantity']
    list_filter = ['tenant_id']
    search_fields = ['name', 'rfid_tag']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(StockLevel)
class StockLevelAdmin(ReadOnlyAdmin):
    """Quantities only change through MovementEngine."""

    list_display = ['product', 'tenant_id', 'quantity', 'below_minimum_display', 'updated_at']
    list_filter = ['tenant_id']
    search_fields = ['product__name', 'product__rfid_tag']
    list_select_related = ['product']

    @admin.display(description=_('Em falta?'), boolean=True)
    def below_minimum_display(self, obj):
        return obj.quantity <= obj.product.minimum_quantity


@admin.register(Movement)
class MovementAdmin(ReadOnlyAdmin):
    """Immutable audit trail."""

    list_display = ['created_at', 'product', 'kind', 'delta', 'balance_after',
                    'actor', 'source', 'justification']
    list_filter = ['kind', 'source', 'tenant_id']
    search_fields = ['product__name', 'justification', 'rfid_tag']
    date_hierarchy = 'created_at'
    list_select_related = ['product', 'actor']


@admin.register(TagRead)
class TagReadAdmin(ReadOnlyAdmin):
    list_display = ['created_at', 'rfid_tag', 'kind', 'actor', 'tenant_id']
    list_filter = ['kind', 'tenant_id']
    search_fields = ['rfid_tag']

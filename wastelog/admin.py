from django.contrib import admin
from django.utils.html import format_html
from .models import WasteRecord


@admin.register(WasteRecord)
class WasteRecordAdmin(admin.ModelAdmin):
    """
    Read-only admin for saved calculations

    Records are append-only; administrators may only view or delete them.
    """

    list_display = [
        'created_at',
        'owner',
        'isotope',
        'dose_rate_usv_h',
        'distance_m',
        'mass_g',
        'activity_mbq_display',
        'density_display',
        'consistency_display',
    ]

    list_filter = [
        'isotope',
        'created_at',
    ]

    search_fields = [
        'isotope',
        'owner__username',
        'owner__email',
    ]

    date_hierarchy = 'created_at'
    list_select_related = ['owner']

    fieldsets = (
        ('Owner', {
            'fields': ('owner', 'created_at')
        }),
        ('Measurement', {
            'fields': (
                'isotope',
                'gamma_constant',
                ('distance_m', 'dose_rate_usv_h'),
                'mass_g',
            )
        }),
        ('Calculated Fields', {
            'fields': (
                ('activity_mbq', 'activity_bq'),
                'density_bq_per_g',
            )
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def activity_mbq_display(self, obj):
        return f"{obj.activity_mbq:.5e}"
    activity_mbq_display.short_description = 'Activity (MBq)'

    def density_display(self, obj):
        return f"{obj.density_bq_per_g:.5g}"
    density_display.short_description = 'Density (Bq/g)'

    def consistency_display(self, obj):
        """Flag rows whose stored values no longer match the formula"""
        if obj.is_consistent():
            return format_html('<span style="color: {};">{}</span>', 'green', '✓ Consistent')
        return format_html('<span style="color: {};">{}</span>', 'red', '⚠ Mismatch')
    consistency_display.short_description = 'Formula Check'


# Customize admin site headers
admin.site.site_header = "Waste Density Administration"
admin.site.site_title = "Waste Density"
admin.site.index_title = "Waste activity density records"

from django.contrib import admin

from .models import FreightRoute


@admin.register(FreightRoute)
class FreightRouteAdmin(admin.ModelAdmin):
    list_display = ("id", "carrier", "origin_zip", "dest_zip", "price_per_kg", "min_price", "deadline_days", "status")
    list_filter = ("status", "carrier")
    search_fields = ("origin_zip", "dest_zip", "carrier__razao_social", "source_file")
    readonly_fields = ("price_per_kg", "min_price", "imported_at", "created_at", "updated_at")

from django.contrib import admin

from .models import Freight, QuoteRequest


@admin.register(QuoteRequest)
class QuoteRequestAdmin(admin.ModelAdmin):
    list_display = ("origin_zip", "dest_zip", "taxable_weight", "offers_count", "best_price", "used_fallback", "created_at")
    list_filter = ("used_fallback", "created_at")
    search_fields = ("origin_zip", "dest_zip")
    date_hierarchy = "created_at"


@admin.register(Freight)
class FreightAdmin(admin.ModelAdmin):
    list_display = ("id", "carrier", "origin_zip", "dest_zip", "price", "payment_status",
                    "carrier_amount", "repasse_due_date", "repasse_status")
    list_filter = ("payment_status", "repasse_status", "carrier")
    search_fields = ("origin_zip", "dest_zip", "checkout_session_id", "carrier__razao_social")
    date_hierarchy = "created_at"
    readonly_fields = ("price", "cost_total", "margin_percent", "carrier_amount", "rotaclick_amount",
                       "payment_term_days", "repasse_due_date", "paid_at", "repasse_paid_at",
                       "repasse_paid_by", "created_at", "updated_at")

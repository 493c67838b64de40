from django.contrib import admin

from .models import Carrier


@admin.register(Carrier)
class CarrierAdmin(admin.ModelAdmin):
    list_display = ("id", "razao_social", "cnpj", "approval_status", "payment_term_days", "rntrc_status", "approved_at")
    list_filter = ("approval_status", "payment_term_days", "rntrc_status", "antt_registration_status")
    search_fields = ("razao_social", "nome_fantasia", "cnpj", "user__username")
    readonly_fields = ("approved_at", "approved_by", "created_at", "updated_at")

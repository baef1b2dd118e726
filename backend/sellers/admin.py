from django.contrib import admin

from sellers.models import Seller, Specialty


class SpecialtyInline(admin.TabularInline):
    model = Specialty
    extra = 0


@admin.register(Seller)
class SellerAdmin(admin.ModelAdmin):
    list_display = [
        "business_name",
        "user",
        "city",
        "postal_code",
        "status",
        "is_available",
        "rating",
        "total_requests",
    ]
    list_filter = ["status", "is_available", "is_verified", "city"]
    search_fields = ["business_name", "user__username", "user__email", "city", "postal_code"]
    readonly_fields = ["total_requests", "responded_requests", "created_at", "updated_at"]
    inlines = [SpecialtyInline]

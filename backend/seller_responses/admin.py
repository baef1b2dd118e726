from django.contrib import admin

from seller_responses.models import SellerResponse


@admin.register(SellerResponse)
class SellerResponseAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "item_request",
        "seller",
        "price",
        "status",
        "response_time",
        "is_read",
        "created_at",
    ]
    list_filter = ["status", "is_read", "created_at"]
    search_fields = ["message", "seller__business_name", "item_request__title"]
    readonly_fields = ["response_time", "read_at", "feedback_at", "created_at", "updated_at"]

from django.contrib import admin

from item_requests.models import ItemRequest


@admin.register(ItemRequest)
class ItemRequestAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "title",
        "user",
        "category",
        "sub_category",
        "city",
        "status",
        "priority",
        "created_at",
        "expires_at",
    ]
    list_filter = ["status", "priority", "category", "created_at"]
    search_fields = ["title", "description", "user__username", "city", "postal_code"]
    readonly_fields = ["response_count", "view_count", "created_at", "updated_at"]

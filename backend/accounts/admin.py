from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from accounts.models import User, DeviceToken


class DeviceTokenInline(admin.StackedInline):
    model = DeviceToken
    extra = 0
    readonly_fields = ["updated_at"]


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Buyers, sellers and staff in one table; role tells them apart"""

    list_display = ["username", "email", "first_name", "role", "is_active", "date_joined"]
    list_filter = ["role", "is_active", "is_staff"]
    search_fields = ["username", "email", "first_name", "phone_number"]
    ordering = ("-date_joined",)
    inlines = [DeviceTokenInline]

    fieldsets = BaseUserAdmin.fieldsets + (
        ("Marketplace", {"fields": ("role", "phone_number", "avatar")}),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Marketplace", {"fields": ("role", "phone_number")}),
    )


@admin.register(DeviceToken)
class DeviceTokenAdmin(admin.ModelAdmin):
    list_display = ["user", "platform", "device_model", "app_version", "updated_at"]
    list_filter = ["platform"]
    search_fields = ["user__username", "user__email", "token"]

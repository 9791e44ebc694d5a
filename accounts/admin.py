from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Badge, User


class BadgeInline(admin.TabularInline):
    model = Badge
    extra = 0
    readonly_fields = ("earned_at",)
    fields = ("name", "description", "icon_url", "earned_at")


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = (
        "username", "email", "role", "total_points", "current_streak", "longest_streak",
        "is_staff", "is_active", "date_joined",
    )
    list_filter = ("role", "is_staff", "is_superuser", "is_active")
    search_fields = ("username", "email", "phone_number", "first_name", "last_name")
    ordering = ("-date_joined",)
    inlines = [BadgeInline]

    fieldsets = BaseUserAdmin.fieldsets + (
        ("Profile", {"fields": ("role", "phone_number")}),
        ("Progression", {"fields": ("total_points", "current_streak", "longest_streak")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Profile", {
            "classes": ("wide",),
            "fields": ("role", "email", "phone_number"),
        }),
    )
    # progression only moves through completed attempts
    readonly_fields = ("total_points", "current_streak", "longest_streak")


@admin.register(Badge)
class BadgeAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "earned_at")
    search_fields = ("name", "user__username", "user__email")
    raw_id_fields = ("user",)
    readonly_fields = ("earned_at",)

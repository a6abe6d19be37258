from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Category, Notification, Product, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
	fieldsets = (*BaseUserAdmin.fieldsets, ("Contact", {"fields": ("location", "phone_country_code", "phone_number")}))
	list_display = (*BaseUserAdmin.list_display, "location")


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
	list_display = ("name", "slug", "parent", "is_active")
	prepopulated_fields = {"slug": ("name",)}
	search_fields = ("name",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
	list_display = ("title", "owner", "category", "price", "status", "accepts_trade_offers", "created_at")
	list_filter = ("status", "accepts_trade_offers", "condition", "category")
	search_fields = ("title", "description", "owner__username")
	filter_horizontal = ("preferred_categories",)
	# Status changes from trades go through the trade engine
	readonly_fields = ("status",)


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
	list_display = ("user", "event_type", "message", "level", "is_read", "created_at")
	list_filter = ("level", "is_read", "event_type")

from django.contrib import admin

from .models import TradeOffer, TradeOfferHistory


class TradeOfferHistoryInline(admin.TabularInline):
	model = TradeOfferHistory
	extra = 0
	can_delete = False
	readonly_fields = ("event_type", "actor", "message", "created_at")
	exclude = ("snapshot",)


@admin.register(TradeOffer)
class TradeOfferAdmin(admin.ModelAdmin):
	list_display = ("id", "offered_by", "requested_from", "offered_product", "requested_product", "status", "expires_at")
	list_filter = ("status", "is_counter_offer")
	search_fields = ("offered_by__username", "requested_from__username")
	inlines = (TradeOfferHistoryInline,)
	# Status changes go through the trade engine
	readonly_fields = ("status", "child_offer_ids", "responded_at", "completed_at")

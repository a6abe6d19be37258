from rest_framework import serializers

from core.models import Product
from core.serializers import SimpleUserSerializer
from trade.enums.trade_offer_statuses import TradeOfferStatuses
from trade.models import TradeOffer


class TradeOfferProductSerializer(serializers.ModelSerializer):
	class Meta:
		model = Product
		fields = ("id", "title", "price", "images", "status", "condition", "category")


class TimelineEntrySerializer(serializers.Serializer):  # noqa: D101
	event = serializers.CharField()
	timestamp = serializers.DateTimeField()
	actor_id = serializers.IntegerField(allow_null=True)
	actor = serializers.CharField(allow_null=True)
	description = serializers.CharField(allow_blank=True)


class TradeOfferSerializer(serializers.ModelSerializer):
	offered_product = TradeOfferProductSerializer(read_only=True)
	requested_product = TradeOfferProductSerializer(read_only=True)
	offered_by = SimpleUserSerializer(read_only=True)
	requested_from = SimpleUserSerializer(read_only=True)
	is_valid = serializers.BooleanField(read_only=True)
	is_expired = serializers.BooleanField(read_only=True)
	days_remaining = serializers.IntegerField(read_only=True)

	class Meta:
		model = TradeOffer
		fields = "__all__"
		read_only_fields = [field.name for field in TradeOffer._meta.fields]


class TradeOfferDetailSerializer(TradeOfferSerializer):
	timeline = serializers.SerializerMethodField()

	@staticmethod
	def get_timeline(obj: TradeOffer) -> list[dict]:
		"""
		Get the timeline of events for the trade offer.

		Args:
			obj (TradeOffer): The trade offer instance.

		Returns:
			list[dict]: The serialized timeline, oldest event first.
		"""
		return TimelineEntrySerializer(obj.timeline, many=True).data


class TradeOfferCreateSerializer(serializers.Serializer):
	"""Request body for a new trade offer. Business rules are checked by the state machine."""

	offered_product_id = serializers.IntegerField()
	requested_product_id = serializers.IntegerField()
	additional_cash_offer = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
	message = serializers.CharField(required=False, allow_blank=True, default="")
	meetup_preferred = serializers.BooleanField(required=False)
	meetup_location = serializers.CharField(required=False, allow_blank=True, max_length=255)
	shipping_preferred = serializers.BooleanField(required=False)
	shipping_details = serializers.CharField(required=False, allow_blank=True, max_length=255)
	additional_notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)

	def special_conditions(self) -> dict:
		"""The meetup and shipping fields that were sent."""  # noqa: DOC201
		return {
			key: value
			for key, value in self.validated_data.items()
			if key not in {"offered_product_id", "requested_product_id", "additional_cash_offer", "message", "parent_offer_id"}
		}


class CounterOfferCreateSerializer(TradeOfferCreateSerializer):
	parent_offer_id = serializers.IntegerField()


class TradeActionSerializer(serializers.Serializer):  # noqa: D101
	ACTIONS = ("accept", "reject", "cancel", "complete")

	action = serializers.ChoiceField(choices=ACTIONS)
	trade_offer_id = serializers.IntegerField()
	reason = serializers.CharField(required=False, allow_blank=True, default="")

	def to_internal_value(self, data):
		if hasattr(data, "get") and isinstance(data.get("action"), str):
			data = {key: data.get(key) for key in data}
			data["action"] = data["action"].lower()

		return super().to_internal_value(data)


class TradeOfferListQuerySerializer(serializers.Serializer):
	"""Query parameters accepted by the trade offer list."""

	role = serializers.ChoiceField(choices=("sent", "received"), required=False)
	status = serializers.ChoiceField(choices=TradeOfferStatuses.choices(), required=False)

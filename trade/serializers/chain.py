from box import Box
from rest_framework import serializers

from trade.serializers.trade_offer import TradeOfferSerializer


class ChainNodeSerializer(serializers.Serializer):
	"""A counter-offer tree as nested ``offer`` / ``depth`` / ``children`` objects."""

	offer = TradeOfferSerializer(read_only=True)
	depth = serializers.IntegerField(read_only=True)
	children = serializers.SerializerMethodField()

	def get_children(self, obj: Box) -> list[dict]:
		return ChainNodeSerializer(obj.children, many=True, context=self.context).data

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from trade.serializers.trade_offer import TradeActionSerializer, TradeOfferDetailSerializer
from trade.services.state_machine import OfferStateMachine


class TradeActionView(APIView):
	"""View to handle trade offer actions: accept, reject, cancel and complete."""

	permission_classes = (IsAuthenticated,)

	def post(self, request: Request, *args, **kwargs) -> Response:
		serializer = TradeActionSerializer(data=request.data)
		serializer.is_valid(raise_exception=True)

		action = serializer.validated_data["action"]
		offer_id = serializer.validated_data["trade_offer_id"]
		machine = OfferStateMachine()

		if action == "reject":
			offer = machine.reject(offer_id, request.user.id, reason=serializer.validated_data["reason"])

		else:
			offer = getattr(machine, action)(offer_id, request.user.id)

		return Response(
			{
				"detail": f"Trade offer {action} action completed.",
				"trade_offer": TradeOfferDetailSerializer(offer).data,
			},
			status=status.HTTP_200_OK,
		)

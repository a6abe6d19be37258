from django.db.models import Q, QuerySet
from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from trade.enums.trade_offer_statuses import TradeOfferStatuses
from trade.models import TradeOffer
from trade.serializers.chain import ChainNodeSerializer
from trade.serializers.trade_offer import (
	CounterOfferCreateSerializer,
	TimelineEntrySerializer,
	TradeOfferCreateSerializer,
	TradeOfferDetailSerializer,
	TradeOfferListQuerySerializer,
	TradeOfferSerializer,
)
from trade.services.counter_offers import CounterOfferChainManager
from trade.services.state_machine import OfferStateMachine


class TradeOfferViewSet(mixins.RetrieveModelMixin, mixins.ListModelMixin, GenericViewSet):
	"""
	Trade offers of the authenticated user.

	Status changes go through ``trade-offers/actions/``; this viewset only
	creates offers and reads them.
	"""

	serializer_class = TradeOfferSerializer
	permission_classes = (IsAuthenticated,)
	ordering_fields = ("created_at", "expires_at", "additional_cash_offer")

	def get_queryset(self) -> QuerySet[TradeOffer]:
		"""Restrict offers to those the authenticated user is a party of."""
		user = self.request.user

		return (
			TradeOffer.objects.filter(Q(offered_by=user) | Q(requested_from=user))
			.select_related("offered_product", "requested_product", "offered_by", "requested_from")
			.order_by("-created_at", "-id")
		)

	def get_serializer_class(self):
		if self.action == "retrieve":
			return TradeOfferDetailSerializer

		return super().get_serializer_class()

	def filter_queryset(self, queryset: QuerySet[TradeOffer]) -> QuerySet[TradeOffer]:
		queryset = super().filter_queryset(queryset)

		if self.action != "list":
			return queryset

		params = TradeOfferListQuerySerializer(data=self.request.query_params)
		params.is_valid(raise_exception=True)

		role = params.validated_data.get("role")
		offer_status = params.validated_data.get("status")

		if role == "sent":
			queryset = queryset.filter(offered_by=self.request.user)

		elif role == "received":
			queryset = queryset.filter(requested_from=self.request.user)

		if offer_status:
			queryset = queryset.filter(status=offer_status)

		return queryset

	def create(self, request: Request, *args, **kwargs) -> Response:
		"""Create a root trade offer from the authenticated user."""
		return self._create_offer(TradeOfferCreateSerializer(data=request.data))

	@action(detail=False, methods=["post"], url_path="counter-offer")
	def counter_offer(self, request: Request) -> Response:
		"""Create a counter-offer against a pending offer the user is a party of."""
		return self._create_offer(CounterOfferCreateSerializer(data=request.data))

	@action(detail=False, methods=["get"])
	def history(self, request: Request) -> Response:
		"""The user's accepted and completed trades."""
		queryset = self.get_queryset().filter(status__in=[TradeOfferStatuses.ACCEPTED, TradeOfferStatuses.COMPLETED])
		return self._paginated(queryset)

	@action(detail=False, methods=["get"], url_path="all", permission_classes=[IsAuthenticated, IsAdminUser])
	def all_offers(self, request: Request) -> Response:
		"""Every trade offer in the system, for staff."""
		queryset = TradeOffer.objects.select_related(
			"offered_product",
			"requested_product",
			"offered_by",
			"requested_from",
		).order_by("-created_at", "-id")

		if offer_status := request.query_params.get("status"):
			queryset = queryset.filter(status=offer_status)

		return self._paginated(queryset)

	@action(detail=True, methods=["get"])
	def chain(self, request: Request, pk: str | None = None) -> Response:
		"""The whole negotiation the offer belongs to, from its root offer down."""
		offer = self.get_object()
		manager = CounterOfferChainManager()
		root = manager.get_root(offer.pk)

		return Response(ChainNodeSerializer(manager.get_chain(root.pk)).data)

	@action(detail=True, methods=["get"])
	def timeline(self, request: Request, pk: str | None = None) -> Response:
		"""The offer's events, oldest first."""
		offer = self.get_object()
		return Response(TimelineEntrySerializer(offer.timeline, many=True).data)

	def _create_offer(self, serializer: TradeOfferCreateSerializer) -> Response:
		serializer.is_valid(raise_exception=True)
		data = serializer.validated_data

		offer = OfferStateMachine().create(
			offered_product_id=data["offered_product_id"],
			requested_product_id=data["requested_product_id"],
			proposer_id=self.request.user.id,
			cash=data["additional_cash_offer"],
			message=data["message"],
			parent_offer_id=data.get("parent_offer_id"),
			special_conditions=serializer.special_conditions(),
		)

		return Response(TradeOfferDetailSerializer(offer).data, status=status.HTTP_201_CREATED)

	def _paginated(self, queryset: QuerySet[TradeOffer]) -> Response:
		page = self.paginate_queryset(queryset)

		if page is not None:
			return self.get_paginated_response(TradeOfferSerializer(page, many=True).data)

		return Response(TradeOfferSerializer(queryset, many=True).data)

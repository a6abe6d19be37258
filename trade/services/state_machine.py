"""Trade offer state machine.

Validates every client action against the offer's persisted state and
applies it with a conditional write. Accepting is handed to the
:class:`~trade.services.claim_coordinator.ClaimCoordinator`, which has to
claim both products in the same transaction.

Re-issuing a transition that already happened (rejecting a rejected offer,
accepting an accepted one, ...) returns the stored offer without writing
history or sending notifications again.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import transaction
from django.utils import timezone

from core.enums.product_statuses import ProductStatuses
from takas.settings import TRADE_SETTINGS
from trade.enums.trade_offer_events import NotificationEvents, TradeOfferEvents
from trade.enums.trade_offer_statuses import TradeOfferStatuses
from trade.exceptions import (
	AuthorizationError,
	InvalidCashOffer,
	InvalidStateTransition,
	NotOfferParty,
	OfferAlreadyResolved,
	OfferExpired,
	ParentOfferNotPending,
	ProductNotOwned,
	ProductNotTradeable,
	SelfTradeNotAllowed,
	ValidationError,
)
from trade.models import TradeOffer, TradeOfferHistory
from trade.services.claim_coordinator import ClaimCoordinator
from trade.services.entity_store import EntityStore
from trade.services.notifications import NotificationDispatcher, get_notification_dispatcher

logger = logging.getLogger(__name__)

SPECIAL_CONDITION_FIELDS = (
	"meetup_preferred",
	"meetup_location",
	"shipping_preferred",
	"shipping_details",
	"additional_notes",
)


class OfferStateMachine:
	"""Entry point for every trade offer action: create, accept, reject, cancel and complete."""

	def __init__(
		self,
		store: EntityStore | None = None,
		notifier: NotificationDispatcher | None = None,
		coordinator: ClaimCoordinator | None = None,
	) -> None:
		self.store = store or EntityStore()
		self.notifier = notifier or get_notification_dispatcher()
		self.coordinator = coordinator or ClaimCoordinator(store=self.store, notifier=self.notifier)

	@transaction.atomic
	def create(
		self,
		offered_product_id: int,
		requested_product_id: int,
		proposer_id: int,
		cash: Decimal | int | str | None = 0,
		message: str = "",
		parent_offer_id: int | None = None,
		special_conditions: dict[str, Any] | None = None,
	) -> TradeOffer:
		"""
		Create a trade offer, or a counter-offer when ``parent_offer_id`` is given.

		Both products are locked for the rest of the transaction, so an accept
		that claims one of them either finishes before this check or waits for
		the new offer and cascade-rejects it.

		Args:
			offered_product_id: Product the proposer gives; must be theirs.
			requested_product_id: Product the proposer wants; must belong to someone else.
			proposer_id: The authenticated user creating the offer.
			cash: Additional cash offered on top of the product.
			message: Optional message to the recipient.
			parent_offer_id: The pending offer this one counters.
			special_conditions: Meetup/shipping preferences and notes.

		Raises:
			InvalidCashOffer: If the cash amount is negative or not a number.
			ProductNotFound: If either product does not exist.
			SelfTradeNotAllowed: If the requested product is the proposer's own.
			ProductNotOwned: If the offered product is not the proposer's.
			ProductNotTradeable: If a product is not active or the requested one does not accept offers.
			OfferNotFound: If the parent offer does not exist.
			NotOfferParty: If the proposer is not a party of the parent offer.
			ParentOfferNotPending: If the parent offer is no longer pending.

		Returns:
			TradeOffer: The new pending offer.
		"""
		cash = self._parse_cash(cash)
		self._check_length(message, "message")

		# Both product rows stay locked until commit, taken in id order
		fields = {offered_product_id: "offered_product_id", requested_product_id: "requested_product_id"}
		locked = {
			product_id: self.store.get_product(product_id, field=fields[product_id], for_update=True)
			for product_id in sorted(fields)
		}
		offered = locked[offered_product_id]
		requested = locked[requested_product_id]

		if offered.pk == requested.pk or requested.owner_id == proposer_id:
			raise SelfTradeNotAllowed(field="requested_product_id")

		if offered.owner_id != proposer_id:
			raise ProductNotOwned(field="offered_product_id")

		if offered.status != ProductStatuses.ACTIVE:
			raise ProductNotTradeable(f"The offered product is {offered.status}.", field="offered_product_id")

		if requested.status != ProductStatuses.ACTIVE:
			raise ProductNotTradeable(f"The requested product is {requested.status}.", field="requested_product_id")

		if not requested.accepts_trade_offers:
			raise ProductNotTradeable("The requested product does not accept trade offers.", field="requested_product_id")

		parent = None

		if parent_offer_id is not None:
			parent = self.store.get_offer(parent_offer_id, for_update=True)

			if not parent.is_party(proposer_id):
				raise NotOfferParty("Only a party of the original offer can counter it.", field="parent_offer_id")

			if not parent.is_valid:
				raise ParentOfferNotPending(
					f"Trade offer {parent.pk} is {'expired' if parent.status == TradeOfferStatuses.PENDING else parent.status}.",
					field="parent_offer_id",
				)

		conditions = {key: value for key, value in (special_conditions or {}).items() if key in SPECIAL_CONDITION_FIELDS}

		offer = self.store.insert_offer(
			offered_product=offered,
			requested_product=requested,
			offered_by_id=offered.owner_id,
			requested_from_id=requested.owner_id,
			additional_cash_offer=cash,
			message=message,
			is_counter_offer=parent is not None,
			parent_offer=parent,
			**conditions,
		)

		TradeOfferHistory.create_event(
			trade_offer=offer,
			event_type=TradeOfferEvents.CREATED,
			actor_id=proposer_id,
			message=f"Counter-offer to trade offer #{parent.pk}" if parent else "Trade offer created",
		)

		if parent is not None:
			self.store.append_child_offer(parent, offer.pk)

			TradeOfferHistory.create_event(
				trade_offer=parent,
				event_type=TradeOfferEvents.COUNTERED,
				actor_id=proposer_id,
				message=f"Countered with trade offer #{offer.pk}",
			)

		self.notifier.notify(
			NotificationEvents.COUNTER_OFFER_RECEIVED if parent else NotificationEvents.OFFER_CREATED,
			offer.pk,
			offer.requested_from_id,
		)

		logger.info(
			f"Trade offer {offer.pk} created by user {proposer_id}: product {offered.pk} for {requested.pk}"
			+ (f" (counter to {parent.pk})" if parent else ""),
		)

		return offer

	def accept(self, offer_id: int, actor_id: int) -> TradeOffer:
		"""
		Accept a pending offer, claiming both products.

		Raises:
			OfferNotFound: If the offer does not exist.
			NotOfferParty: If the actor is not the recipient.
			OfferAlreadyResolved: If the offer was already rejected, cancelled or completed.
			OfferExpired: If the offer has expired.
			ProductNoLongerAvailable: If a product was claimed by another trade.

		Returns:
			TradeOffer: The accepted offer.
		"""
		offer = self.store.get_offer(offer_id)
		self._authorize(offer, actor_id, {offer.requested_from_id}, "Only the recipient can accept this offer.")

		if offer.status == TradeOfferStatuses.ACCEPTED:
			logger.debug(f"Trade offer {offer.pk} already accepted, returning it unchanged")
			return offer

		if offer.status != TradeOfferStatuses.PENDING:
			raise OfferAlreadyResolved(f"This trade offer is already {offer.status}.", field="trade_offer_id")

		if offer.is_expired:
			raise OfferExpired(field="trade_offer_id")

		return self.coordinator.claim(offer, actor_id)

	def reject(self, offer_id: int, actor_id: int, reason: str = "") -> TradeOffer:
		"""
		Reject a pending offer. Only the recipient may reject.

		Raises:
			OfferNotFound: If the offer does not exist.
			NotOfferParty: If the actor is not the recipient.
			InvalidStateTransition: If the offer is not pending or has expired.

		Returns:
			TradeOffer: The rejected offer.
		"""
		self._check_length(reason, "reason")

		offer = self.store.get_offer(offer_id)
		self._authorize(offer, actor_id, {offer.requested_from_id}, "Only the recipient can reject this offer.")

		return self._transition(
			offer,
			actor_id,
			TradeOfferStatuses.REJECTED,
			event_type=TradeOfferEvents.REJECTED,
			notification=NotificationEvents.OFFER_REJECTED,
			notify_user_id=offer.offered_by_id,
			history_message=reason or "Trade offer rejected",
			response_message=reason,
			responded_at=timezone.now(),
		)

	def cancel(self, offer_id: int, actor_id: int) -> TradeOffer:
		"""
		Cancel a pending offer. Only the proposer may cancel.

		Raises:
			OfferNotFound: If the offer does not exist.
			NotOfferParty: If the actor is not the proposer.
			InvalidStateTransition: If the offer is not pending or has expired.

		Returns:
			TradeOffer: The cancelled offer.
		"""
		offer = self.store.get_offer(offer_id)
		self._authorize(offer, actor_id, {offer.offered_by_id}, "Only the proposer can cancel this offer.")

		return self._transition(
			offer,
			actor_id,
			TradeOfferStatuses.CANCELLED,
			event_type=TradeOfferEvents.CANCELLED,
			notification=NotificationEvents.OFFER_CANCELLED,
			notify_user_id=offer.requested_from_id,
			history_message="Trade offer cancelled by the proposer",
			responded_at=timezone.now(),
		)

	def complete(self, offer_id: int, actor_id: int) -> TradeOffer:
		"""
		Mark an accepted offer as completed. Either party may do it.

		Products are not touched: they were marked sold when the offer was accepted.

		Raises:
			OfferNotFound: If the offer does not exist.
			NotOfferParty: If the actor is not a party of the offer.
			InvalidStateTransition: If the offer is not accepted.

		Returns:
			TradeOffer: The completed offer.
		"""
		offer = self.store.get_offer(offer_id)
		self._authorize(
			offer,
			actor_id,
			{offer.offered_by_id, offer.requested_from_id},
			"Only a party of the trade can mark it completed.",
		)

		return self._transition(
			offer,
			actor_id,
			TradeOfferStatuses.COMPLETED,
			event_type=TradeOfferEvents.COMPLETED,
			notification=NotificationEvents.OFFER_COMPLETED,
			notify_user_id=offer.other_party_id(actor_id),
			history_message="Trade marked as completed",
			completed_at=timezone.now(),
		)

	def _transition(
		self,
		offer: TradeOffer,
		actor_id: int,
		target: TradeOfferStatuses,
		*,
		event_type: TradeOfferEvents,
		notification: NotificationEvents,
		notify_user_id: int,
		history_message: str,
		**fields: Any,  # noqa: ANN401
	) -> TradeOffer:
		"""Apply a single-record transition with a compare-and-set on the current status."""  # noqa: DOC201, DOC501
		if offer.status == target:
			logger.debug(f"Trade offer {offer.pk} already {target}, returning it unchanged")
			return offer

		self._ensure_transition_allowed(offer, target)
		expected = offer.status

		with transaction.atomic():
			if not self.store.compare_and_set_offer_status(offer.pk, expected, target, **fields):
				current = self.store.get_offer(offer.pk)

				if current.status == target:
					return current

				logger.warning(f"Trade offer {offer.pk} moved to {current.status} before it could be {target}")
				raise InvalidStateTransition(
					f"This trade offer is already {current.status}.",
					field="trade_offer_id",
				)

			offer.refresh_from_db()

			TradeOfferHistory.create_event(
				trade_offer=offer,
				event_type=event_type,
				actor_id=actor_id,
				message=history_message,
			)

			self.notifier.notify(notification, offer.pk, notify_user_id)

		logger.info(f"Trade offer {offer.pk}: {expected} -> {target} by user {actor_id}")

		return offer

	@staticmethod
	def _ensure_transition_allowed(offer: TradeOffer, target: TradeOfferStatuses) -> None:
		if not TradeOfferStatuses.can_transition(offer.status, target):
			raise InvalidStateTransition(
				f"A {offer.status} trade offer cannot be {target}.",
				field="trade_offer_id",
			)

		if offer.status == TradeOfferStatuses.PENDING and offer.is_expired:
			raise OfferExpired(field="trade_offer_id")

	@staticmethod
	def _authorize(offer: TradeOffer, actor_id: int, allowed: set[int], message: str) -> None:
		if actor_id not in allowed:
			error = NotOfferParty if not offer.is_party(actor_id) else AuthorizationError
			raise error(message, field="actor_id")

	@staticmethod
	def _parse_cash(cash: Decimal | int | str | None) -> Decimal:
		try:
			amount = Decimal(str(0 if cash is None or cash == "" else cash))

		except InvalidOperation as e:
			raise InvalidCashOffer("The additional cash offer must be a number.", field="additional_cash_offer") from e

		if not amount.is_finite() or amount < 0:
			raise InvalidCashOffer(field="additional_cash_offer")

		return amount

	@staticmethod
	def _check_length(text: str, field: str) -> None:
		if text and len(text) > TRADE_SETTINGS.MAX_MESSAGE_LENGTH:
			raise ValidationError(
				f"The {field} cannot be longer than {TRADE_SETTINGS.MAX_MESSAGE_LENGTH} characters.",
				field=field,
			)

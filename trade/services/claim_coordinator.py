"""Atomic accept protocol.

Accepting an offer touches several records: the offer itself, both of its
products and every other pending offer that references those products. All
of it happens in one database transaction built on conditional writes:

1. ``pending → accepted`` on the offer. If another request already resolved
   it, nothing has been written and :class:`OfferAlreadyResolved` is raised.
2. ``active → sold`` on both products. If either was already claimed by a
   different trade, :class:`ProductNoLongerAvailable` is raised and the
   transaction rollback puts the offer back to ``pending``.
3. Every other pending offer on either product is rejected with a system reason.

Two accepts on offers that share a product can therefore never both succeed:
whichever reaches step 2 second finds the product already sold.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from takas.settings import TRADE_SETTINGS
from trade.enums.trade_offer_events import NotificationEvents, TradeOfferEvents
from trade.enums.trade_offer_statuses import TradeOfferStatuses
from trade.exceptions import ConflictError, OfferAlreadyResolved, ProductNoLongerAvailable
from trade.models import TradeOffer, TradeOfferHistory
from trade.services.entity_store import EntityStore
from trade.services.notifications import NotificationDispatcher, get_notification_dispatcher

logger = logging.getLogger(__name__)


class ClaimCoordinator:
	"""Commits both products of an offer to it and cascade-rejects competing offers."""

	def __init__(self, store: EntityStore | None = None, notifier: NotificationDispatcher | None = None) -> None:
		self.store = store or EntityStore()
		self.notifier = notifier or get_notification_dispatcher()

	def claim(self, offer: TradeOffer, actor_id: int) -> TradeOffer:
		"""
		Accept the offer and claim its products.

		The caller has already checked that ``actor_id`` is the recipient and
		that the offer looked pending and unexpired when it was read.

		Args:
			offer: The offer to accept.
			actor_id: The recipient accepting it.

		Raises:
			OfferAlreadyResolved: If the offer left ``pending`` concurrently.
			ProductNoLongerAvailable: If either product was already claimed.

		Returns:
			TradeOffer: The accepted offer.
		"""
		product_ids = sorted(set(offer.product_ids))

		try:
			with transaction.atomic():
				if not self.store.compare_and_set_offer_status(
					offer.pk,
					TradeOfferStatuses.PENDING,
					TradeOfferStatuses.ACCEPTED,
					responded_at=timezone.now(),
				):
					raise OfferAlreadyResolved(field="trade_offer_id")

				unavailable = self.store.claim_products(product_ids)

				if unavailable:
					field = "offered_product_id" if unavailable[0] == offer.offered_product_id else "requested_product_id"
					raise ProductNoLongerAvailable(field=field)

				rejected_ids = self.store.reject_pending_offers_for_products(
					product_ids,
					exclude_offer_id=offer.pk,
					reason=TRADE_SETTINGS.CASCADE_REJECT_REASON,
				)

				offer.refresh_from_db()
				self._record(offer, actor_id, rejected_ids)

		except ConflictError as e:
			logger.warning(f"Accept of trade offer {offer.pk} by user {actor_id} lost a race: {e.kind}")
			raise

		logger.info(
			f"Trade offer {offer.pk} accepted by user {actor_id}; products {product_ids} sold, "
			f"{len(rejected_ids)} competing offer(s) rejected",
		)

		return offer

	def _record(self, offer: TradeOffer, actor_id: int, rejected_ids: list[int]) -> None:
		"""Write history and schedule notifications for the accepted offer and everything it knocked out."""
		TradeOfferHistory.create_event(
			trade_offer=offer,
			event_type=TradeOfferEvents.ACCEPTED,
			actor_id=actor_id,
			message="Trade offer accepted",
		)
		self.notifier.notify(NotificationEvents.OFFER_ACCEPTED, offer.pk, offer.offered_by_id)

		for rejected in self.store.get_offers_by_ids(rejected_ids).values():
			TradeOfferHistory.create_event(
				trade_offer=rejected,
				event_type=TradeOfferEvents.CASCADE_REJECTED,
				message=f"{rejected.response_message} (trade offer #{offer.pk})",
			)

			self.notifier.notify_many(
				NotificationEvents.OFFER_CASCADE_REJECTED,
				[(rejected.pk, user_id) for user_id in (rejected.offered_by_id, rejected.requested_from_id) if user_id != actor_id],
			)

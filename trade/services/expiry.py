"""Expiry sweep for pending trade offers.

Expired pending offers are already non-actionable (every transition check
looks at ``expires_at``); the sweep just makes it durable by moving them to
``cancelled`` with a system reason.
"""

from __future__ import annotations

import logging
from datetime import datetime

from django.db import transaction
from django.utils import timezone

from takas.settings import TRADE_SETTINGS
from trade.enums.trade_offer_events import NotificationEvents, TradeOfferEvents
from trade.enums.trade_offer_statuses import TradeOfferStatuses
from trade.models import TradeOffer, TradeOfferHistory
from trade.services.entity_store import EntityStore
from trade.services.notifications import NotificationDispatcher, get_notification_dispatcher

logger = logging.getLogger(__name__)


class OfferExpirySweeper:
	"""Cancels pending offers whose ``expires_at`` has passed."""

	def __init__(self, store: EntityStore | None = None, notifier: NotificationDispatcher | None = None) -> None:
		self.store = store or EntityStore()
		self.notifier = notifier or get_notification_dispatcher()

	def sweep(self, now: datetime | None = None) -> list[int]:
		"""
		Expire every pending offer past its expiry.

		Each offer is moved with its own compare-and-set, so an offer accepted
		or rejected while the sweep runs is left alone.

		Args:
			now: Reference time, defaults to the current time.

		Returns:
			list[int]: Ids of the offers this sweep expired.
		"""
		now = now or timezone.now()
		expired = []

		for offer in self.store.scan_expired_pending_offers(now):
			if self.expire(offer, now):
				expired.append(offer.pk)

		if expired:
			logger.info(f"Expired {len(expired)} trade offer(s): {expired}")

		return expired

	def expire(self, offer: TradeOffer, now: datetime) -> bool:
		"""Cancel one expired offer. Returns False if it was resolved concurrently."""  # noqa: DOC201
		with transaction.atomic():
			if not self.store.compare_and_set_offer_status(
				offer.pk,
				TradeOfferStatuses.PENDING,
				TradeOfferStatuses.CANCELLED,
				response_message=TRADE_SETTINGS.EXPIRED_REASON,
				responded_at=now,
			):
				logger.debug(f"Trade offer {offer.pk} was resolved before it could expire")
				return False

			offer.refresh_from_db()

			TradeOfferHistory.create_event(
				trade_offer=offer,
				event_type=TradeOfferEvents.EXPIRED,
				message=TRADE_SETTINGS.EXPIRED_REASON,
			)

			self.notifier.notify_many(
				NotificationEvents.OFFER_EXPIRED,
				[(offer.pk, offer.offered_by_id), (offer.pk, offer.requested_from_id)],
			)

		return True

	@staticmethod
	def next_expiry() -> datetime | None:
		"""When the earliest still-pending offer expires, if any."""  # noqa: DOC201
		return (
			TradeOffer.objects.filter(status=TradeOfferStatuses.PENDING)
			.order_by("expires_at")
			.values_list("expires_at", flat=True)
			.first()
		)

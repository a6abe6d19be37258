"""Best-effort notifications for trade offer events.

Notifications are scheduled with ``transaction.on_commit`` so they are only
sent for transitions that were actually committed, and any failure while
delivering them is logged and dropped: a notification problem never undoes
a trade offer transition.
"""

import logging
from functools import partial

from django.db import transaction

from core.models import Notification
from trade.enums.trade_offer_events import NotificationEvents

logger = logging.getLogger(__name__)

MESSAGES: dict[str, tuple[str, str, int]] = {
	NotificationEvents.OFFER_CREATED: ("You received a new trade offer.", "info", 5),
	NotificationEvents.COUNTER_OFFER_RECEIVED: ("You received a counter-offer.", "info", 5),
	NotificationEvents.OFFER_ACCEPTED: ("Your trade offer was accepted.", "success", 8),
	NotificationEvents.OFFER_REJECTED: ("Your trade offer was rejected.", "warning", 5),
	NotificationEvents.OFFER_CANCELLED: ("A trade offer you received was cancelled.", "info", 3),
	NotificationEvents.OFFER_CASCADE_REJECTED: (
		"Your trade offer was rejected: a product in it was committed to another trade.",
		"warning",
		6,
	),
	NotificationEvents.OFFER_COMPLETED: ("A trade you are part of was marked as completed.", "success", 4),
	NotificationEvents.OFFER_EXPIRED: ("A trade offer you are part of has expired.", "info", 2),
}


class NotificationDispatcher:
	"""Delivers ``(event_type, offer_id, affected_user_id)`` events to users."""

	def notify(self, event_type: str, offer_id: int, affected_user_id: int) -> None:
		"""
		Schedule a notification for after the current transaction commits.

		Outside a transaction the notification is delivered immediately.

		Args:
			event_type: A :class:`NotificationEvents` value.
			offer_id: The trade offer the event is about.
			affected_user_id: The user to notify.
		"""
		transaction.on_commit(partial(self.deliver, event_type, offer_id, affected_user_id))

	def notify_many(self, event_type: str, targets: list[tuple[int, int]]) -> None:
		"""
		Schedule the same event for several ``(offer_id, affected_user_id)`` pairs.

		Args:
			event_type: A :class:`NotificationEvents` value.
			targets: Offer and user id pairs.
		"""
		for offer_id, affected_user_id in targets:
			self.notify(event_type, offer_id, affected_user_id)

	def deliver(self, event_type: str, offer_id: int, affected_user_id: int) -> None:
		"""Store the notification (and send it by SMS if enabled), swallowing delivery errors."""
		message, level, priority = MESSAGES.get(event_type, ("A trade offer was updated.", "info", 1))

		try:
			self.send(
				Notification(
					user_id=affected_user_id,
					event_type=event_type,
					trade_offer_id=offer_id,
					message=message,
					level=level,
					priority=priority,
					redirect_to=f"/trade-offers/{offer_id}/",
				),
			)

		except Exception:
			logger.exception(f"Could not deliver {event_type} notification for trade offer {offer_id} to user {affected_user_id}")

	@staticmethod
	def send(notification: Notification) -> None:
		"""Persist a notification."""
		notification.save()


def get_notification_dispatcher() -> NotificationDispatcher:
	"""The dispatcher used by the engine's default services."""  # noqa: DOC201
	return NotificationDispatcher()

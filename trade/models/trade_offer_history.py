"""Trade offer history model.

An append-only audit log for trade offers. Entries are written in the same
database transaction as the status change they describe, so the log never
shows a transition that was rolled back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from takas.common.util import django_obj_to_dict
from trade.enums.trade_offer_events import TradeOfferEvents

if TYPE_CHECKING:
	from trade.models.trade_offer import TradeOffer


class TradeOfferHistory(models.Model):
	"""Audit log entry for a trade offer event.

	Attributes:
		trade_offer: The offer this event is associated with.
		event_type: Type of event that occurred.
		actor: User who triggered this event (None for system events such as cascades and expiry).
		message: Human-readable description.
		snapshot: JSON snapshot of the offer row right after the event.
		created_at: When this event occurred.

	Examples:
		>>> TradeOfferHistory.create_event(
		...     trade_offer=offer,
		...     event_type=TradeOfferEvents.REJECTED,
		...     actor_id=user.id,
		...     message="Not interested",
		... )
	"""

	trade_offer = models.ForeignKey(
		"trade.TradeOffer",
		on_delete=models.CASCADE,
		related_name="history",
		help_text="The trade offer this event is for",
	)

	event_type = models.CharField(
		max_length=30,
		choices=TradeOfferEvents.choices(),
		help_text="Type of event that occurred",
	)

	actor = models.ForeignKey(
		"core.User",
		on_delete=models.SET_NULL,
		null=True,
		blank=True,
		related_name="trade_offer_actions",
		help_text="User who triggered this event (None for system events)",
	)

	message = models.TextField(
		blank=True,
		help_text="Human-readable description of this event",
	)

	snapshot = models.JSONField(
		null=True,
		blank=True,
		encoder=DjangoJSONEncoder,
		help_text="JSON snapshot of the trade offer at this point in time",
	)

	created_at = models.DateTimeField(
		auto_now_add=True,
		help_text="When this event occurred",
	)

	class Meta:  # noqa: D106
		ordering = ("-created_at", "-id")
		verbose_name = "Trade Offer History"
		verbose_name_plural = "Trade Offer Histories"
		indexes = [
			models.Index(fields=["trade_offer", "-created_at"], name="offer_history_offer_date_idx"),
			models.Index(fields=["event_type"], name="offer_history_event_type_idx"),
			models.Index(fields=["actor"], name="offer_history_actor_idx"),
		]

	def __str__(self) -> str:
		return f"{self.event_type} by {self.get_actor_display()} at {self.created_at}"

	def __repr__(self) -> str:
		return (
			f"<TradeOfferHistory(trade_offer_id={self.trade_offer_id}, "
			f"event={self.event_type}, actor={self.get_actor_display()})>"
		)

	@classmethod
	def create_event(
		cls,
		trade_offer: TradeOffer,
		event_type: str,
		actor_id: int | None = None,
		message: str = "",
	) -> TradeOfferHistory:
		"""Create a new history event with a snapshot of the offer.

		Args:
			trade_offer: The offer this event is for, in its post-event state.
			event_type: Type of event (must be a :class:`TradeOfferEvents` value).
			actor_id: Id of the user who triggered the event (None for system events).
			message: Description of the event.

		Returns:
			The created TradeOfferHistory instance.

		Raises:
			ValueError: If event_type is not valid.
		"""
		if event_type not in TradeOfferEvents._value2member_map_:
			raise ValueError(
				f"Invalid event_type '{event_type}'. Must be one of: {', '.join(TradeOfferEvents)}"
			)

		return cls.objects.create(
			trade_offer=trade_offer,
			event_type=event_type,
			actor_id=actor_id,
			message=message,
			snapshot=django_obj_to_dict(trade_offer),
		)

	def get_actor_display(self) -> str:
		"""Get display name for the actor who triggered this event.

		Returns:
			Username if actor exists, otherwise "System".
		"""
		return self.actor.username if self.actor else "System"

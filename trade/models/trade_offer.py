"""Trade offer model.

A trade offer proposes exchanging one product for another, optionally with
extra cash. Offers form a forest: root offers have no parent, counter-offers
hang off the offer they answer. Status changes never happen through
``save()``; they go through the services in :mod:`trade.services`, which use
conditional updates so concurrent requests cannot both win.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from box import Box
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from takas.common.util import days_until
from takas.settings import TRADE_SETTINGS
from trade.enums.trade_offer_statuses import TradeOfferStatuses
from trade.types.timeline import TimelineEntry

if TYPE_CHECKING:
	from core.models import User
	from trade.models.trade_offer_history import TradeOfferHistory


def default_expiry() -> datetime:
	"""Offers stay actionable for ``OFFER_TTL_DAYS`` after creation."""  # noqa: DOC201
	return timezone.now() + timedelta(days=TRADE_SETTINGS.OFFER_TTL_DAYS)


class TradeOffer(models.Model):
	"""Model representing an offer to exchange one product for another.

	``offered_by`` and ``requested_from`` are copied from the two products'
	owners when the offer is created and are not re-derived afterwards, so a
	later ownership change does not move the offer to different parties.

	Attributes:
		offered_product: Product the proposer gives.
		requested_product: Product the proposer wants.
		offered_by: Proposer, owner of ``offered_product`` at creation.
		requested_from: Recipient, owner of ``requested_product`` at creation.
		additional_cash_offer: Cash the proposer adds on top of the product.
		status: Current status of the offer.
		is_counter_offer: Whether this offer answers another one.
		parent_offer: The offer this one counters.
		child_offer_ids: Ids of counter-offers raised against this offer, in creation order.
		expires_at: After this moment a pending offer can no longer be acted on.

	Examples:
		>>> offer = OfferStateMachine().create(bike.id, guitar.id, proposer_id=alice.id, cash=Decimal("20"))
		>>> offer.status
		'pending'
		>>> offer.days_remaining
		7
	"""

	offered_product = models.ForeignKey(
		"core.Product",
		on_delete=models.PROTECT,
		related_name="offers_made",
		help_text="Product offered by the proposer",
	)
	requested_product = models.ForeignKey(
		"core.Product",
		on_delete=models.PROTECT,
		related_name="offers_received",
		help_text="Product requested from the recipient",
	)
	offered_by = models.ForeignKey(
		"core.User",
		on_delete=models.PROTECT,
		related_name="trade_offers_sent",
	)
	requested_from = models.ForeignKey(
		"core.User",
		on_delete=models.PROTECT,
		related_name="trade_offers_received",
	)

	additional_cash_offer = models.DecimalField(
		max_digits=12,
		decimal_places=2,
		default=Decimal(0),
		validators=[MinValueValidator(Decimal(0))],
	)
	message = models.CharField(max_length=TRADE_SETTINGS.MAX_MESSAGE_LENGTH, blank=True)
	response_message = models.CharField(
		max_length=TRADE_SETTINGS.MAX_MESSAGE_LENGTH,
		blank=True,
		help_text="Rejection reason, or the system reason for automatic transitions",
	)

	status = models.CharField(
		max_length=20,
		choices=TradeOfferStatuses.choices(),
		default=TradeOfferStatuses.PENDING.value,
	)

	# Counter-offer tree
	is_counter_offer = models.BooleanField(default=False)
	parent_offer = models.ForeignKey(
		"self",
		on_delete=models.SET_NULL,
		null=True,
		blank=True,
		related_name="counter_offers",
		help_text="The offer this counter-offer answers",
	)
	child_offer_ids = models.JSONField(
		default=list,
		blank=True,
		help_text="Ids of counter-offers raised against this offer, append-only",
	)

	# Special conditions
	meetup_preferred = models.BooleanField(default=False)
	meetup_location = models.CharField(max_length=255, blank=True)
	shipping_preferred = models.BooleanField(default=False)
	shipping_details = models.CharField(max_length=255, blank=True)
	additional_notes = models.TextField(max_length=TRADE_SETTINGS.MAX_NOTES_LENGTH, blank=True)

	expires_at = models.DateTimeField(default=default_expiry)
	responded_at = models.DateTimeField(null=True, blank=True)
	completed_at = models.DateTimeField(null=True, blank=True)
	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:  # noqa: D106
		ordering = ("-created_at",)
		indexes = [
			models.Index(fields=["status"], name="offer_status_idx"),
			models.Index(fields=["offered_product", "status"], name="offer_offered_product_idx"),
			models.Index(fields=["requested_product", "status"], name="offer_requested_product_idx"),
			models.Index(fields=["offered_by", "status"], name="offer_offered_by_idx"),
			models.Index(fields=["requested_from", "status"], name="offer_requested_from_idx"),
			models.Index(fields=["parent_offer"], name="offer_parent_idx"),
			models.Index(fields=["status", "expires_at"], name="offer_status_expiry_idx"),
		]

	def __str__(self) -> str:
		return f"Trade offer #{self.pk}: {self.offered_product_id} for {self.requested_product_id} ({self.status})"

	@property
	def is_expired(self) -> bool:
		"""Whether the offer's expiry moment has passed."""
		return self.expires_at is not None and self.expires_at <= timezone.now()

	@property
	def is_valid(self) -> bool:
		"""Whether the offer can still be acted on (pending and not expired)."""
		return self.status == TradeOfferStatuses.PENDING and not self.is_expired

	@property
	def days_remaining(self) -> int:
		"""Days left before the offer expires, 0 unless it is pending."""
		if self.status != TradeOfferStatuses.PENDING:
			return 0

		return days_until(self.expires_at, timezone.now())

	@property
	def product_ids(self) -> tuple[int, int]:
		"""Both products referenced by the offer."""
		return (self.offered_product_id, self.requested_product_id)

	def is_party(self, user_id: int) -> bool:
		"""
		Check whether the user is the proposer or the recipient of the offer.

		Args:
			user_id: Id of the user to check.

		Returns:
			bool: True if the user is one of the two parties.
		"""
		return user_id in {self.offered_by_id, self.requested_from_id}

	def other_party_id(self, user_id: int) -> int:
		"""
		Get the party on the other side of the offer.

		Args:
			user_id: Id of one of the parties.

		Returns:
			int: Id of the other party.
		"""
		return self.requested_from_id if user_id == self.offered_by_id else self.offered_by_id

	@property
	def timeline(self) -> list[Box]:
		"""
		The timeline of the offer, oldest event first.

		Returns:
			list[Box]: :class:`TimelineEntry` values built from the offer history.
		"""
		return [self.construct_timeline_entry(entry) for entry in self.history.order_by("created_at", "id")]

	@staticmethod
	def construct_timeline_entry(entry: TradeOfferHistory) -> Box:
		"""
		Construct a timeline entry from a history record.

		Args:
			entry: The history record.

		Returns:
			Box: The constructed timeline entry.
		"""
		actor: User | None = entry.actor

		return Box(
			TimelineEntry(
				event=entry.event_type,
				timestamp=entry.created_at,
				actor_id=actor.id if actor else None,
				actor=actor.username if actor else None,
				description=entry.message,
			),
		)

from enum import StrEnum


class TradeOfferEvents(StrEnum):
	"""Things that happen to a trade offer, recorded in its history and sent as notifications."""

	CREATED = "created"
	COUNTERED = "countered"
	ACCEPTED = "accepted"
	REJECTED = "rejected"
	CANCELLED = "cancelled"
	CASCADE_REJECTED = "cascade_rejected"
	COMPLETED = "completed"
	EXPIRED = "expired"

	@classmethod
	def choices(cls) -> list[tuple[str, str]]:
		"""
		Get the events as Django field choices.

		Returns:
			list[tuple[str, str]]: ``(value, label)`` pairs.
		"""
		return [(member.value, member.name.replace("_", " ").title()) for member in cls]


class NotificationEvents(StrEnum):
	"""Event types handed to the notification collaborator."""

	OFFER_CREATED = "offer_created"
	COUNTER_OFFER_RECEIVED = "counter_offer_received"
	OFFER_ACCEPTED = "offer_accepted"
	OFFER_REJECTED = "offer_rejected"
	OFFER_CANCELLED = "offer_cancelled"
	OFFER_CASCADE_REJECTED = "offer_cascade_rejected"
	OFFER_COMPLETED = "offer_completed"
	OFFER_EXPIRED = "offer_expired"

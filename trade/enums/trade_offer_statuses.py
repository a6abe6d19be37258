from enum import StrEnum


class TradeOfferStatuses(StrEnum):
	"""The status of a trade offer.

	Status Flow:
		pending → accepted → completed
		   └→ rejected
		   └→ cancelled
	"""

	PENDING = "pending"
	ACCEPTED = "accepted"
	REJECTED = "rejected"
	CANCELLED = "cancelled"
	COMPLETED = "completed"

	@classmethod
	def choices(cls) -> list[tuple[str, str]]:
		"""
		Get the statuses as Django field choices.

		Returns:
			list[tuple[str, str]]: ``(value, label)`` pairs.
		"""
		return [(member.value, member.name.title()) for member in cls]

	@classmethod
	def get_allowed_transitions(cls) -> dict["TradeOfferStatuses", frozenset["TradeOfferStatuses"]]:
		"""
		Get the transition table of the offer state machine.

		Returns:
			dict[TradeOfferStatuses, frozenset[TradeOfferStatuses]]: Reachable statuses keyed by current status.
		"""
		return {
			cls.PENDING: frozenset({cls.ACCEPTED, cls.REJECTED, cls.CANCELLED}),
			cls.ACCEPTED: frozenset({cls.COMPLETED}),
			cls.REJECTED: frozenset(),
			cls.CANCELLED: frozenset(),
			cls.COMPLETED: frozenset(),
		}

	@classmethod
	def can_transition(cls, current: str, target: str) -> bool:
		"""
		Check whether ``current → target`` is a legal transition.

		Args:
			current: The status the offer is in.
			target: The status the offer should move to.

		Returns:
			bool: True if the transition is allowed.
		"""
		return cls(target) in cls.get_allowed_transitions()[cls(current)]

	@classmethod
	def get_terminal_statuses(cls) -> list["TradeOfferStatuses"]:
		"""
		Get the statuses no transition leads out of.

		Returns:
			list[TradeOfferStatuses]: The dead-end statuses.
		"""
		return [status for status, targets in cls.get_allowed_transitions().items() if not targets]

	@property
	def is_terminal(self) -> bool:
		"""Whether no transition leads out of this status."""
		return self in self.get_terminal_statuses()

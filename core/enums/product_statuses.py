from enum import StrEnum


class ProductStatuses(StrEnum):
	"""Listing status of a product."""

	ACTIVE = "active"
	RESERVED = "reserved"
	SOLD = "sold"
	INACTIVE = "inactive"

	@classmethod
	def choices(cls) -> list[tuple[str, str]]:
		"""
		Get the statuses as Django field choices.

		Returns:
			list[tuple[str, str]]: ``(value, label)`` pairs.
		"""
		return [(member.value, member.name.title()) for member in cls]

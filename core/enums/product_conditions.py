from enum import StrEnum


class ProductConditions(StrEnum):
	"""Physical condition of a listed product."""

	NEW = "new"
	LIKE_NEW = "like_new"
	GOOD = "good"
	FAIR = "fair"
	POOR = "poor"

	@classmethod
	def choices(cls) -> list[tuple[str, str]]:
		"""
		Get the conditions as Django field choices.

		Returns:
			list[tuple[str, str]]: ``(value, label)`` pairs.
		"""
		return [(member.value, member.name.replace("_", " ").title()) for member in cls]

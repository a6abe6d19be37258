from typing import TypedDict


class TradePreferences(TypedDict):
	"""What a product owner is willing to take in exchange."""

	accepts_any_trade: bool
	preferred_category_ids: set[int]
	min_trade_value_percentage: int | None
	note: str

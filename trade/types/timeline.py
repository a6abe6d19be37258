from datetime import datetime
from typing import Optional, TypedDict

from trade.enums.trade_offer_events import TradeOfferEvents


class TimelineEntry(TypedDict):
	"""A timeline entry for a trade offer."""
	event: TradeOfferEvents
	timestamp: datetime
	actor_id: Optional[int]
	actor: Optional[str]
	description: str

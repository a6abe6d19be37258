from .trade_offer import TradeOffer
from .trade_offer_history import TradeOfferHistory

__all__ = [
	"TradeOffer",
	"TradeOfferHistory",
]

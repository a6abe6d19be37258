from typing import TYPE_CHECKING, TypedDict

if TYPE_CHECKING:
	from trade.models import TradeOffer


class ChainNode(TypedDict):
	"""One offer in a counter-offer tree, with the counter-offers raised against it."""

	offer: "TradeOffer"
	depth: int
	children: list["ChainNode"]

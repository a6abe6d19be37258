"""Counter-offer chains.

Counter-offers are stored as a parent link on the child plus an ordered list
of child ids on the parent. Reading a chain walks the child lists from a
root offer; ids that no longer resolve are skipped, and traversal stops with
:class:`ChainTooDeep` past ``TRADE_SETTINGS.MAX_CHAIN_DEPTH`` levels so that
malformed (cyclic) data cannot recurse forever.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from box import Box

from takas.settings import TRADE_SETTINGS
from trade.exceptions import ChainTooDeep
from trade.models import TradeOffer
from trade.services.entity_store import EntityStore
from trade.types.chain import ChainNode

logger = logging.getLogger(__name__)


class CounterOfferChainManager:
	"""Builds and walks the tree of counter-offers below an offer."""

	def __init__(self, store: EntityStore | None = None, max_depth: int | None = None) -> None:
		self.store = store or EntityStore()
		self.max_depth = TRADE_SETTINGS.MAX_CHAIN_DEPTH if max_depth is None else max_depth

	def get_chain(self, root_offer_id: int) -> Box:
		"""
		Resolve the counter-offer tree below an offer.

		Args:
			root_offer_id: The offer to start from, usually a root offer.

		Raises:
			OfferNotFound: If the starting offer does not exist.
			ChainTooDeep: If the tree is deeper than ``max_depth``.

		Returns:
			Box: A :class:`ChainNode` for the starting offer.
		"""
		return self._build(self.store.get_offer(root_offer_id), depth=0)

	def get_root(self, offer_id: int) -> TradeOffer:
		"""
		Follow parent links up to the offer that started the negotiation.

		Raises:
			OfferNotFound: If the offer does not exist.
			ChainTooDeep: If there are more than ``max_depth`` ancestors.

		Returns:
			TradeOffer: The root offer.
		"""
		offer = self.store.get_offer(offer_id)

		for _ in range(self.max_depth):
			if offer.parent_offer_id is None:
				return offer

			offer = self.store.get_offer(offer.parent_offer_id)

		if offer.parent_offer_id is None:
			return offer

		raise ChainTooDeep(f"Trade offer {offer_id} has more than {self.max_depth} ancestors.", field="trade_offer_id")

	@staticmethod
	def flatten(chain: Box) -> Iterator[TradeOffer]:
		"""
		Yield every offer of a chain, parents before their counter-offers.

		Args:
			chain: A node returned by :meth:`get_chain`.

		Yields:
			TradeOffer: The offers in pre-order.
		"""
		yield chain.offer

		for child in chain.children:
			yield from CounterOfferChainManager.flatten(child)

	def _build(self, offer: TradeOffer, depth: int) -> Box:
		if depth > self.max_depth:
			raise ChainTooDeep(
				f"The counter-offer chain is deeper than {self.max_depth} levels.",
				field="trade_offer_id",
			)

		children_by_id = self.store.get_offers_by_ids(offer.child_offer_ids)
		children = []

		for child_id in offer.child_offer_ids:
			child = children_by_id.get(child_id)

			if child is None:
				logger.warning(f"Trade offer {offer.pk} lists missing counter-offer {child_id}, skipping it")
				continue

			children.append(self._build(child, depth + 1))

		return Box(ChainNode(offer=offer, depth=depth, children=children))

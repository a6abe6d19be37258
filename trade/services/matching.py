"""Smart-match suggestions for a tradeable product."""

from __future__ import annotations

import logging
from decimal import Decimal

from core.enums.product_statuses import ProductStatuses
from core.models import Product
from takas.settings import TRADE_SETTINGS
from trade.exceptions import NotEligibleForMatching, ProductNotFound
from trade.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


class MatchingEngine:
	"""Read-only lookup of other users' products a product could be traded for."""

	def __init__(self, store: EntityStore | None = None, limit: int | None = None) -> None:
		self.store = store or EntityStore()
		self.limit = TRADE_SETTINGS.SMART_MATCH_LIMIT if limit is None else limit

	def find_matches(self, product_id: int, requester_id: int, limit: int | None = None) -> list[Product]:
		"""
		Candidate products for a trade against ``product_id``, newest listing first.

		Candidates are other owners' active products that accept trade offers,
		narrowed by the product's trade preferences: its preferred categories
		when it has any, and a minimum price when ``min_trade_value_percentage``
		is set.

		Args:
			product_id: The requester's product.
			requester_id: The user asking; must own the product.
			limit: Maximum number of results, defaults to ``TRADE_SETTINGS.SMART_MATCH_LIMIT``.

		Raises:
			NotEligibleForMatching: If the product does not exist, is not the
				requester's, or does not accept trade offers.

		Returns:
			list[Product]: The candidates.

		Examples:
			>>> MatchingEngine().find_matches(product.id, product.owner_id)
			[<Product: Camera (bob)>, <Product: Tent (carol)>]
		"""
		try:
			product = self.store.get_product(product_id)

		except ProductNotFound as e:
			raise NotEligibleForMatching(f"Product {product_id} not found.", field="product_id") from e

		if product.owner_id != requester_id:
			raise NotEligibleForMatching("You can only find matches for your own products.", field="product_id")

		if not product.accepts_trade_offers:
			raise NotEligibleForMatching("This product does not accept trade offers.", field="product_id")

		preferences = product.trade_preferences
		filters = {"status": ProductStatuses.ACTIVE, "accepts_trade_offers": True}

		if preferences.preferred_category_ids:
			filters["category_id__in"] = sorted(preferences.preferred_category_ids)

		if preferences.min_trade_value_percentage is not None:
			filters["price__gte"] = product.price * Decimal(preferences.min_trade_value_percentage) / 100

		candidates = self.store.scan_products(exclude_owner_id=requester_id, **filters).select_related("category")
		matches = list(candidates[: self.limit if limit is None else limit])

		logger.debug(f"{len(matches)} smart match(es) for product {product.pk}")

		return matches

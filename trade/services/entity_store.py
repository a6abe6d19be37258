"""Durable storage for products and trade offers.

Every status change in the engine goes through :meth:`EntityStore.compare_and_set_offer_status`,
:meth:`EntityStore.compare_and_set_product_status` or
:meth:`EntityStore.reject_pending_offers_for_products`. Each of them is a
single ``UPDATE ... WHERE id = ? AND status = ?`` statement, so the database
decides which of two concurrent writers wins; the affected row count tells
the caller whether it was this one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from django.db.models import Q, QuerySet
from django.utils import timezone

from core.enums.product_statuses import ProductStatuses
from core.models import Product
from trade.enums.trade_offer_statuses import TradeOfferStatuses
from trade.exceptions import OfferNotFound, ProductNotFound
from trade.models import TradeOffer

logger = logging.getLogger(__name__)


class EntityStore:
	"""Keyed access, scans and conditional writes over ``products`` and ``trade_offers``."""

	# Point lookups

	@staticmethod
	def get_product(product_id: int, *, field: str = "product_id", for_update: bool = False) -> Product:
		"""
		Fetch a product by id.

		Args:
			product_id: The product id.
			field: Request field named in the error if the product does not exist.
			for_update: Lock the row until the surrounding transaction ends.

		Raises:
			ProductNotFound: If no product has this id.

		Returns:
			Product: The product.
		"""
		queryset = Product.objects.select_related("owner")

		if for_update:
			queryset = queryset.select_for_update(of=("self",))

		try:
			return queryset.get(pk=product_id)

		except (Product.DoesNotExist, ValueError, TypeError) as e:
			raise ProductNotFound(f"Product {product_id} not found.", field=field) from e

	@staticmethod
	def get_offer(offer_id: int, *, for_update: bool = False) -> TradeOffer:
		"""
		Fetch a trade offer by id.

		Args:
			offer_id: The offer id.
			for_update: Lock the row until the surrounding transaction ends.

		Raises:
			OfferNotFound: If no offer has this id.

		Returns:
			TradeOffer: The offer.
		"""
		queryset = TradeOffer.objects.all()

		if for_update:
			queryset = queryset.select_for_update()

		try:
			return queryset.get(pk=offer_id)

		except (TradeOffer.DoesNotExist, ValueError, TypeError) as e:
			raise OfferNotFound(f"Trade offer {offer_id} not found.", field="trade_offer_id") from e

	@staticmethod
	def get_offers_by_ids(offer_ids: Iterable[int]) -> dict[int, TradeOffer]:
		"""
		Fetch several offers at once. Unknown ids are simply absent from the result.

		Returns:
			dict[int, TradeOffer]: Offers keyed by id.
		"""
		return TradeOffer.objects.in_bulk(list(offer_ids))

	# Scans

	@staticmethod
	def scan_products(*, exclude_owner_id: int | None = None, **filters: Any) -> QuerySet[Product]:  # noqa: ANN401
		"""
		Filtered scan over products.

		Args:
			exclude_owner_id: Leave out products owned by this user.
			**filters: Django field lookups applied with ``filter()``.

		Returns:
			QuerySet[Product]: The matching products, newest first.
		"""
		queryset = Product.objects.filter(**filters)

		if exclude_owner_id is not None:
			queryset = queryset.exclude(owner_id=exclude_owner_id)

		return queryset.order_by("-created_at", "-id")

	@staticmethod
	def scan_offers_for_products(product_ids: Iterable[int], *, status: str | None = None) -> QuerySet[TradeOffer]:
		"""
		All offers that reference any of the products, on either side.

		Returns:
			QuerySet[TradeOffer]: The matching offers.
		"""
		product_ids = list(product_ids)
		queryset = TradeOffer.objects.filter(
			Q(offered_product_id__in=product_ids) | Q(requested_product_id__in=product_ids),
		)

		if status is not None:
			queryset = queryset.filter(status=status)

		return queryset

	@staticmethod
	def scan_expired_pending_offers(now: datetime | None = None) -> QuerySet[TradeOffer]:
		"""
		Pending offers whose expiry has passed.

		Returns:
			QuerySet[TradeOffer]: The expired offers, oldest expiry first.
		"""
		return TradeOffer.objects.filter(
			status=TradeOfferStatuses.PENDING,
			expires_at__lte=now or timezone.now(),
		).order_by("expires_at", "id")

	# Writes

	@staticmethod
	def insert_offer(**fields: Any) -> TradeOffer:  # noqa: ANN401
		"""
		Insert a new trade offer.

		Returns:
			TradeOffer: The stored offer.
		"""
		offer = TradeOffer(**fields)
		offer.full_clean(exclude=["offered_product", "requested_product", "offered_by", "requested_from"])
		offer.save(force_insert=True)
		return offer

	@staticmethod
	def append_child_offer(parent: TradeOffer, child_id: int) -> None:
		"""
		Append a counter-offer id to its parent's child list.

		The caller must hold the parent row lock (``get_offer(..., for_update=True)``).
		"""
		parent.child_offer_ids = [*parent.child_offer_ids, child_id]
		parent.save(update_fields=["child_offer_ids", "updated_at"])

	@staticmethod
	def compare_and_set_offer_status(offer_id: int, expected: str, new: str, **fields: Any) -> bool:  # noqa: ANN401
		"""
		Move an offer from ``expected`` to ``new`` status if it is still in ``expected``.

		Args:
			offer_id: The offer id.
			expected: Status the offer must currently have.
			new: Status to set.
			**fields: Other columns written in the same statement.

		Returns:
			bool: True if this call performed the transition.
		"""
		updated = TradeOffer.objects.filter(pk=offer_id, status=expected).update(
			status=new,
			updated_at=timezone.now(),
			**fields,
		)

		if not updated:
			logger.debug(f"CAS on trade offer {offer_id} ({expected} -> {new}) did not apply")

		return updated == 1

	@staticmethod
	def compare_and_set_product_status(product_id: int, expected: str, new: str) -> bool:
		"""
		Move a product from ``expected`` to ``new`` status if it is still in ``expected``.

		Returns:
			bool: True if this call performed the transition.
		"""
		updated = Product.objects.filter(pk=product_id, status=expected).update(status=new, updated_at=timezone.now())

		if not updated:
			logger.debug(f"CAS on product {product_id} ({expected} -> {new}) did not apply")

		return updated == 1

	def reject_pending_offers_for_products(
		self,
		product_ids: Iterable[int],
		*,
		exclude_offer_id: int,
		reason: str,
	) -> list[int]:
		"""
		Reject every other pending offer that references any of the products.

		The candidate rows are locked before the update so the returned ids are
		exactly the offers this call rejected. Must run inside a transaction.

		Args:
			product_ids: Products that were just claimed.
			exclude_offer_id: The offer that claimed them.
			reason: Stored as the rejected offers' response message.

		Returns:
			list[int]: Ids of the offers that were rejected.
		"""
		now = timezone.now()
		offer_ids = list(
			self.scan_offers_for_products(product_ids, status=TradeOfferStatuses.PENDING)
			.exclude(pk=exclude_offer_id)
			.select_for_update()
			.order_by("id")
			.values_list("id", flat=True),
		)

		if not offer_ids:
			return []

		TradeOffer.objects.filter(pk__in=offer_ids, status=TradeOfferStatuses.PENDING).update(
			status=TradeOfferStatuses.REJECTED,
			response_message=reason,
			responded_at=now,
			updated_at=now,
		)

		return offer_ids

	@staticmethod
	def claim_products(product_ids: Iterable[int]) -> list[int]:
		"""
		Mark each product sold, stopping at the first one that is no longer active.

		Returns:
			list[int]: Ids of the products that could not be claimed (empty on success).
		"""
		for product_id in product_ids:
			if not EntityStore.compare_and_set_product_status(product_id, ProductStatuses.ACTIVE, ProductStatuses.SOLD):
				return [product_id]

		return []

"""Product listings that can be sold or exchanged through trade offers."""

from __future__ import annotations

from decimal import Decimal

from box import Box
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.enums.product_conditions import ProductConditions
from core.enums.product_statuses import ProductStatuses
from core.types.trade_preferences import TradePreferences


class Product(models.Model):
	"""A listed good owned by a user.

	``status`` moves to ``sold`` only when a trade offer for the product is
	accepted; owners may otherwise toggle between ``active``, ``reserved`` and
	``inactive``. Trade preferences are stored as plain columns and exposed as
	a single structured value through :attr:`trade_preferences`.

	Examples:
		>>> product = Product.objects.create(
		...     owner=user,
		...     title="Road bike",
		...     price=Decimal("350.00"),
		...     category=sports,
		...     accepts_trade_offers=True,
		... )
		>>> product.is_tradeable
		True
	"""

	owner = models.ForeignKey(
		"core.User",
		on_delete=models.CASCADE,
		related_name="products",
		help_text="Current owner of the product",
	)
	title = models.CharField(max_length=100)
	description = models.TextField(blank=True)
	price = models.DecimalField(
		max_digits=12,
		decimal_places=2,
		validators=[MinValueValidator(Decimal(0))],
	)
	category = models.ForeignKey(
		"core.Category",
		on_delete=models.PROTECT,
		related_name="products",
	)
	condition = models.CharField(
		max_length=20,
		choices=ProductConditions.choices(),
		default=ProductConditions.GOOD.value,
	)
	location = models.CharField(max_length=100, blank=True)
	images = models.JSONField(
		default=list,
		blank=True,
		help_text="Image URLs or storage ids, managed by the image service",
	)
	status = models.CharField(
		max_length=20,
		choices=ProductStatuses.choices(),
		default=ProductStatuses.ACTIVE.value,
	)

	accepts_trade_offers = models.BooleanField(default=False)
	accepts_any_trade = models.BooleanField(default=False)
	preferred_categories = models.ManyToManyField(
		"core.Category",
		blank=True,
		related_name="preferred_by_products",
		help_text="Categories the owner would like to receive in exchange",
	)
	min_trade_value_percentage = models.PositiveSmallIntegerField(
		null=True,
		blank=True,
		validators=[MinValueValidator(0), MaxValueValidator(200)],
		help_text="Minimum value of a candidate, as a percentage of this product's price",
	)
	trade_note = models.CharField(max_length=500, blank=True)

	created_at = models.DateTimeField(auto_now_add=True)
	updated_at = models.DateTimeField(auto_now=True)

	class Meta:  # noqa: D106
		ordering = ("-created_at",)
		indexes = [
			models.Index(fields=["status", "accepts_trade_offers"], name="product_status_trade_idx"),
			models.Index(fields=["owner", "status"], name="product_owner_status_idx"),
			models.Index(fields=["-created_at"], name="product_created_idx"),
		]

	def __str__(self) -> str:
		return f"{self.title} ({self.owner})"

	@property
	def is_tradeable(self) -> bool:
		"""Whether new trade offers may target this product."""
		return self.status == ProductStatuses.ACTIVE and self.accepts_trade_offers

	@property
	def trade_preferences(self) -> Box:
		"""
		The owner's trade preferences as one structured value.

		Returns:
			Box: A :class:`TradePreferences` wrapped in a Box.
		"""
		return Box(
			TradePreferences(
				accepts_any_trade=self.accepts_any_trade,
				preferred_category_ids=set(self.preferred_categories.values_list("id", flat=True)),
				min_trade_value_percentage=self.min_trade_value_percentage,
				note=self.trade_note,
			),
		)

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from core.enums.product_statuses import ProductStatuses
from core.models import Product
from trade.exceptions import NotEligibleForMatching
from trade.services.matching import MatchingEngine

pytestmark = pytest.mark.django_db


def test_matches_are_other_owners_tradeable_active_products(make_product, bike, guitar, camera, alice, bob):
	make_product(alice, "My other item")
	make_product(bob, "Not for trade", accepts_trade_offers=False)
	make_product(bob, "Already sold", status=ProductStatuses.SOLD)
	make_product(bob, "Hidden", status=ProductStatuses.INACTIVE)

	matches = MatchingEngine().find_matches(bike.pk, alice.id)

	assert {product.pk for product in matches} == {guitar.pk, camera.pk}


def test_matches_are_newest_first(make_product, bike, alice, bob):
	older = make_product(bob, "Older")
	newer = make_product(bob, "Newer")
	Product.objects.filter(pk=older.pk).update(created_at=timezone.now() - timedelta(days=3))

	matches = MatchingEngine().find_matches(bike.pk, alice.id)

	assert [product.pk for product in matches] == [newer.pk, older.pk]


def test_preferred_categories_restrict_matches(make_product, bike, guitar, bob, alice, bikes, cameras):
	bike.preferred_categories.set([bikes])
	other_bike = make_product(bob, "BMX", category=bikes)

	matches = MatchingEngine().find_matches(bike.pk, alice.id)

	assert [product.pk for product in matches] == [other_bike.pk]


def test_min_trade_value_percentage_sets_price_floor(make_product, bike, alice, bob):
	bike.min_trade_value_percentage = 50
	bike.save()
	make_product(bob, "Cheap", price=Decimal("174.99"))
	at_floor = make_product(bob, "At floor", price=Decimal("175.00"))
	pricey = make_product(bob, "Pricey", price=Decimal("900.00"))

	matches = MatchingEngine().find_matches(bike.pk, alice.id)

	assert {product.pk for product in matches} == {at_floor.pk, pricey.pk}


def test_filters_combine(make_product, bike, alice, bob, bikes):
	bike.preferred_categories.set([bikes])
	bike.min_trade_value_percentage = 100
	bike.save()
	make_product(bob, "Cheap bike", category=bikes, price=Decimal("10.00"))
	good = make_product(bob, "Good bike", category=bikes, price=Decimal("400.00"))
	make_product(bob, "Expensive camera", price=Decimal("999.00"))

	assert MatchingEngine().find_matches(bike.pk, alice.id) == [good]


def test_limit_caps_results(make_product, bike, alice, bob):
	for i in range(5):
		make_product(bob, f"Item {i}")

	assert len(MatchingEngine(limit=3).find_matches(bike.pk, alice.id)) == 3
	assert len(MatchingEngine().find_matches(bike.pk, alice.id, limit=2)) == 2


def test_matching_requires_ownership(bike, bob):
	with pytest.raises(NotEligibleForMatching):
		MatchingEngine().find_matches(bike.pk, bob.id)


def test_matching_requires_accepting_trade_offers(bike, alice):
	bike.accepts_trade_offers = False
	bike.save()

	with pytest.raises(NotEligibleForMatching):
		MatchingEngine().find_matches(bike.pk, alice.id)


def test_matching_unknown_product(alice):
	with pytest.raises(NotEligibleForMatching):
		MatchingEngine().find_matches(999_999, alice.id)


def test_matching_never_mutates(make_product, bike, guitar, alice):
	before = list(Product.objects.order_by("pk").values_list("pk", "status", "updated_at"))

	MatchingEngine().find_matches(bike.pk, alice.id)

	assert list(Product.objects.order_by("pk").values_list("pk", "status", "updated_at")) == before

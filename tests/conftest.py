from collections.abc import Callable
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from core.models import Category, Product, User
from trade.models import TradeOffer
from trade.services.state_machine import OfferStateMachine


@pytest.fixture
def alice(db) -> User:
	return User.objects.create_user(username="alice", password="correct-horse-1", email="alice@example.com")


@pytest.fixture
def bob(db) -> User:
	return User.objects.create_user(username="bob", password="correct-horse-2", email="bob@example.com")


@pytest.fixture
def carol(db) -> User:
	return User.objects.create_user(username="carol", password="correct-horse-3", email="carol@example.com")


@pytest.fixture
def dave(db) -> User:
	return User.objects.create_user(username="dave", password="correct-horse-4", email="dave@example.com")


@pytest.fixture
def cameras(db) -> Category:
	return Category.objects.create(name="Cameras", slug="test-cameras")


@pytest.fixture
def bikes(db) -> Category:
	return Category.objects.create(name="Bikes", slug="test-bikes")


@pytest.fixture
def make_product(cameras) -> Callable[..., Product]:
	"""Factory for tradeable products; override any field with keyword arguments."""

	def _make_product(owner: User, title: str = "Item", **fields) -> Product:
		preferred = fields.pop("preferred_categories", [])
		fields.setdefault("price", Decimal("100.00"))
		fields.setdefault("category", cameras)
		fields.setdefault("accepts_trade_offers", True)

		product = Product.objects.create(owner=owner, title=title, **fields)

		if preferred:
			product.preferred_categories.set(preferred)

		return product

	return _make_product


@pytest.fixture
def machine() -> OfferStateMachine:
	return OfferStateMachine()


@pytest.fixture
def make_offer(machine) -> Callable[..., TradeOffer]:
	"""Create an offer through the state machine, proposed by the owner of the offered product."""

	def _make_offer(offered: Product, requested: Product, **kwargs) -> TradeOffer:
		return machine.create(offered.pk, requested.pk, offered.owner_id, **kwargs)

	return _make_offer


@pytest.fixture
def bike(make_product, alice, bikes) -> Product:
	return make_product(alice, "Road bike", category=bikes, price=Decimal("350.00"))


@pytest.fixture
def guitar(make_product, bob) -> Product:
	return make_product(bob, "Acoustic guitar", price=Decimal("300.00"))


@pytest.fixture
def camera(make_product, carol) -> Product:
	return make_product(carol, "Film camera", price=Decimal("250.00"))


@pytest.fixture
def api_client() -> APIClient:
	return APIClient()


@pytest.fixture
def client_for(api_client) -> Callable[[User], APIClient]:
	"""An API client authenticated as the given user."""

	def _client_for(user: User) -> APIClient:
		api_client.force_authenticate(user=user)
		return api_client

	return _client_for

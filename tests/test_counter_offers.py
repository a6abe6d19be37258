import logging

import pytest

from trade.enums.trade_offer_events import TradeOfferEvents
from trade.enums.trade_offer_statuses import TradeOfferStatuses
from trade.exceptions import ChainTooDeep, NotOfferParty, OfferNotFound, ParentOfferNotPending
from trade.models import TradeOffer
from trade.services.counter_offers import CounterOfferChainManager

pytestmark = pytest.mark.django_db


@pytest.fixture
def root_offer(make_offer, bike, guitar) -> TradeOffer:
	return make_offer(bike, guitar)


def test_counter_offer_links_parent_and_child(make_offer, root_offer, guitar, bike, bob):
	counter = make_offer(guitar, bike, cash="10", parent_offer_id=root_offer.pk)

	root_offer.refresh_from_db()
	assert counter.is_counter_offer
	assert counter.parent_offer_id == root_offer.pk
	assert counter.offered_by_id == bob.id
	assert root_offer.child_offer_ids == [counter.pk]
	assert root_offer.status == TradeOfferStatuses.PENDING
	assert root_offer.history.filter(event_type=TradeOfferEvents.COUNTERED, actor=bob).count() == 1


def test_child_ids_keep_creation_order(make_offer, make_product, root_offer, bike, alice, bob):
	first = make_offer(make_product(bob, "Amplifier"), bike, parent_offer_id=root_offer.pk)
	second = make_offer(make_product(alice, "Helmet"), make_product(bob, "Drum"), parent_offer_id=root_offer.pk)

	root_offer.refresh_from_db()
	assert root_offer.child_offer_ids == [first.pk, second.pk]


def test_counter_offer_by_stranger_is_not_offer_party(machine, make_product, root_offer, bike, carol):
	camera = make_product(carol, "Camera")

	with pytest.raises(NotOfferParty):
		machine.create(camera.pk, bike.pk, carol.id, parent_offer_id=root_offer.pk)


def test_counter_offer_against_unknown_parent(machine, guitar, bike, bob):
	with pytest.raises(OfferNotFound):
		machine.create(guitar.pk, bike.pk, bob.id, parent_offer_id=424_242)


@pytest.mark.parametrize(
	"resolve",
	[
		pytest.param(lambda machine, offer: machine.reject(offer.pk, offer.requested_from_id), id="rejected"),
		pytest.param(lambda machine, offer: machine.cancel(offer.pk, offer.offered_by_id), id="cancelled"),
		pytest.param(lambda machine, offer: machine.accept(offer.pk, offer.requested_from_id), id="accepted"),
		pytest.param(
			lambda machine, offer: (
				machine.accept(offer.pk, offer.requested_from_id),
				machine.complete(offer.pk, offer.offered_by_id),
			),
			id="completed",
		),
	],
)
def test_counter_offer_requires_pending_parent(machine, make_product, root_offer, alice, bob, resolve):
	resolve(machine, root_offer)
	# Fresh products so that only the parent's status can fail the request
	mine = make_product(bob, "Amplifier")
	theirs = make_product(alice, "Helmet")

	with pytest.raises(ParentOfferNotPending):
		machine.create(mine.pk, theirs.pk, bob.id, parent_offer_id=root_offer.pk)

	root_offer.refresh_from_db()
	assert root_offer.child_offer_ids == []


def test_counter_offer_against_expired_parent(machine, make_product, root_offer, alice, bob):
	TradeOffer.objects.filter(pk=root_offer.pk).update(expires_at=root_offer.created_at)

	with pytest.raises(ParentOfferNotPending):
		machine.create(make_product(bob, "Amp").pk, make_product(alice, "Helmet").pk, bob.id, parent_offer_id=root_offer.pk)


def test_get_chain_builds_nested_tree(make_offer, root_offer, bike, guitar):
	counter = make_offer(guitar, bike, parent_offer_id=root_offer.pk)
	counter_to_counter = make_offer(bike, guitar, cash="5", parent_offer_id=counter.pk)

	manager = CounterOfferChainManager()
	chain = manager.get_chain(root_offer.pk)

	assert chain.offer.pk == root_offer.pk
	assert chain.depth == 0
	assert [child.offer.pk for child in chain.children] == [counter.pk]
	assert chain.children[0].children[0].offer.pk == counter_to_counter.pk
	assert chain.children[0].children[0].depth == 2
	assert [offer.pk for offer in manager.flatten(chain)] == [root_offer.pk, counter.pk, counter_to_counter.pk]
	assert manager.get_root(counter_to_counter.pk).pk == root_offer.pk


def test_get_chain_skips_missing_children(root_offer, caplog):
	TradeOffer.objects.filter(pk=root_offer.pk).update(child_offer_ids=[987_654])

	with caplog.at_level(logging.WARNING, logger="trade.services.counter_offers"):
		chain = CounterOfferChainManager().get_chain(root_offer.pk)

	assert chain.children == []
	assert "987654" in caplog.text


def test_get_chain_unknown_root():
	with pytest.raises(OfferNotFound):
		CounterOfferChainManager().get_chain(123_456)


def test_cyclic_chain_fails_closed(root_offer):
	TradeOffer.objects.filter(pk=root_offer.pk).update(child_offer_ids=[root_offer.pk])

	with pytest.raises(ChainTooDeep):
		CounterOfferChainManager(max_depth=5).get_chain(root_offer.pk)


def test_cyclic_parents_fail_closed(root_offer):
	TradeOffer.objects.filter(pk=root_offer.pk).update(parent_offer=root_offer)

	with pytest.raises(ChainTooDeep):
		CounterOfferChainManager(max_depth=5).get_root(root_offer.pk)


def test_chain_at_depth_limit_is_allowed(make_offer, root_offer, bike, guitar):
	counter = make_offer(guitar, bike, parent_offer_id=root_offer.pk)

	chain = CounterOfferChainManager(max_depth=1).get_chain(root_offer.pk)

	assert chain.children[0].offer.pk == counter.pk

	with pytest.raises(ChainTooDeep):
		CounterOfferChainManager(max_depth=0).get_chain(root_offer.pk)

import pytest

from core.enums.product_statuses import ProductStatuses
from core.models import Product
from takas.settings import TRADE_SETTINGS
from trade.enums.trade_offer_events import TradeOfferEvents
from trade.enums.trade_offer_statuses import TradeOfferStatuses
from trade.exceptions import ConflictError, OfferAlreadyResolved, ProductNoLongerAvailable
from trade.models import TradeOffer
from trade.services.claim_coordinator import ClaimCoordinator

pytestmark = pytest.mark.django_db


def test_accept_claims_both_products_and_rejects_competitors(machine, make_offer, bike, guitar, camera, bob):
	offer1 = make_offer(bike, guitar)
	offer2 = make_offer(camera, guitar)

	accepted = machine.accept(offer1.pk, bob.id)

	assert accepted.status == TradeOfferStatuses.ACCEPTED
	assert accepted.responded_at is not None

	for product in (bike, guitar):
		product.refresh_from_db()
		assert product.status == ProductStatuses.SOLD

	offer2.refresh_from_db()
	assert offer2.status == TradeOfferStatuses.REJECTED
	assert offer2.response_message == TRADE_SETTINGS.CASCADE_REJECT_REASON

	camera.refresh_from_db()
	assert camera.status == ProductStatuses.ACTIVE

	with pytest.raises(OfferAlreadyResolved):
		machine.accept(offer2.pk, bob.id)


def test_cascade_reaches_offers_on_either_side_of_either_product(
	machine,
	make_offer,
	make_product,
	bike,
	guitar,
	camera,
	alice,
	bob,
	carol,
	dave,
):
	lamp = make_product(dave, "Desk lamp")
	kettle = make_product(alice, "Kettle")
	amp = make_product(bob, "Amplifier")

	winner = make_offer(bike, guitar)
	losers = [
		make_offer(camera, guitar),  # same requested product
		make_offer(guitar, lamp),  # requested product offered elsewhere
		make_offer(camera, bike),  # offered product requested elsewhere
		make_offer(bike, lamp),  # offered product offered elsewhere
	]
	bystanders = [make_offer(kettle, amp), make_offer(lamp, camera)]

	machine.accept(winner.pk, bob.id)

	for loser in losers:
		loser.refresh_from_db()
		assert loser.status == TradeOfferStatuses.REJECTED
		assert loser.history.filter(event_type=TradeOfferEvents.CASCADE_REJECTED, actor__isnull=True).count() == 1

	for offer in bystanders:
		offer.refresh_from_db()
		assert offer.status == TradeOfferStatuses.PENDING

	assert not TradeOffer.objects.filter(
		status=TradeOfferStatuses.PENDING,
		offered_product__in=[bike, guitar],
	).exists()
	assert not TradeOffer.objects.filter(
		status=TradeOfferStatuses.PENDING,
		requested_product__in=[bike, guitar],
	).exists()


def test_cascade_leaves_resolved_offers_alone(machine, make_offer, bike, guitar, camera, alice, bob, carol):
	cancelled = make_offer(camera, guitar)
	machine.cancel(cancelled.pk, carol.id)
	winner = make_offer(bike, guitar)

	machine.accept(winner.pk, bob.id)

	cancelled.refresh_from_db()
	assert cancelled.status == TradeOfferStatuses.CANCELLED
	assert cancelled.response_message == ""


def test_claimed_product_rolls_back_the_offer(machine, make_offer, bike, guitar, camera, bob):
	offer = make_offer(bike, guitar)
	competing = make_offer(camera, guitar)
	# Another trade claimed the bike in the meantime
	Product.objects.filter(pk=bike.pk).update(status=ProductStatuses.SOLD)

	with pytest.raises(ProductNoLongerAvailable) as exc_info:
		machine.accept(offer.pk, bob.id)

	assert exc_info.value.message == "This item was just claimed by another trade."
	assert exc_info.value.field == "offered_product_id"
	assert isinstance(exc_info.value, ConflictError)

	offer.refresh_from_db()
	guitar.refresh_from_db()
	competing.refresh_from_db()
	assert offer.status == TradeOfferStatuses.PENDING
	assert offer.responded_at is None
	assert guitar.status == ProductStatuses.ACTIVE
	assert competing.status == TradeOfferStatuses.PENDING
	assert not offer.history.filter(event_type=TradeOfferEvents.ACCEPTED).exists()


def test_claim_on_stale_pending_copy_is_already_resolved(make_offer, bike, guitar, bob):
	offer = make_offer(bike, guitar)
	stale = TradeOffer.objects.get(pk=offer.pk)
	TradeOffer.objects.filter(pk=offer.pk).update(status=TradeOfferStatuses.CANCELLED)

	with pytest.raises(OfferAlreadyResolved):
		ClaimCoordinator().claim(stale, bob.id)

	bike.refresh_from_db()
	assert bike.status == ProductStatuses.ACTIVE


def test_accept_records_history_in_order(machine, make_offer, bike, guitar, alice, bob):
	offer = make_offer(bike, guitar)
	machine.accept(offer.pk, bob.id)
	machine.complete(offer.pk, alice.id)

	assert [entry.event for entry in offer.timeline] == [
		TradeOfferEvents.CREATED,
		TradeOfferEvents.ACCEPTED,
		TradeOfferEvents.COMPLETED,
	]
	assert offer.timeline[1].actor == "bob"

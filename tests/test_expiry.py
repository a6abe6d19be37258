from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import call_command
from django.utils import timezone

from core.models import Notification
from takas.settings import TRADE_SETTINGS
from trade.enums.trade_offer_events import NotificationEvents, TradeOfferEvents
from trade.enums.trade_offer_statuses import TradeOfferStatuses
from trade.models import TradeOffer
from trade.services.expiry import OfferExpirySweeper
from trade.services.expiry_scheduler import ExpiryScheduler

pytestmark = pytest.mark.django_db


def _expire(offer, minutes=1):
	TradeOffer.objects.filter(pk=offer.pk).update(expires_at=timezone.now() - timedelta(minutes=minutes))


def test_sweep_cancels_only_expired_pending_offers(machine, make_offer, make_product, bike, guitar, camera, alice, bob, carol):
	expired = make_offer(bike, guitar)
	fresh = make_offer(camera, guitar)
	already_rejected = make_offer(make_product(alice, "Kettle"), make_product(carol, "Lamp"))
	machine.reject(already_rejected.pk, carol.id)
	_expire(expired)
	_expire(already_rejected)

	swept = OfferExpirySweeper().sweep()

	assert swept == [expired.pk]

	expired.refresh_from_db()
	fresh.refresh_from_db()
	already_rejected.refresh_from_db()
	assert expired.status == TradeOfferStatuses.CANCELLED
	assert expired.response_message == TRADE_SETTINGS.EXPIRED_REASON
	assert expired.history.filter(event_type=TradeOfferEvents.EXPIRED, actor__isnull=True).count() == 1
	assert fresh.status == TradeOfferStatuses.PENDING
	assert already_rejected.status == TradeOfferStatuses.REJECTED


def test_sweep_notifies_both_parties(make_offer, bike, guitar, alice, bob, django_capture_on_commit_callbacks):
	offer = make_offer(bike, guitar)
	_expire(offer)

	with django_capture_on_commit_callbacks(execute=True):
		OfferExpirySweeper().sweep()

	notified = set(Notification.objects.filter(event_type=NotificationEvents.OFFER_EXPIRED).values_list("user_id", flat=True))
	assert notified == {alice.id, bob.id}


def test_sweep_twice_is_a_no_op(make_offer, bike, guitar):
	offer = make_offer(bike, guitar)
	_expire(offer)

	assert OfferExpirySweeper().sweep() == [offer.pk]
	assert OfferExpirySweeper().sweep() == []
	assert offer.history.filter(event_type=TradeOfferEvents.EXPIRED).count() == 1


def test_management_command(make_offer, bike, guitar):
	offer = make_offer(bike, guitar)
	_expire(offer)
	out = StringIO()

	call_command("expire_trade_offers", verbose=True, stdout=out)

	offer.refresh_from_db()
	assert offer.status == TradeOfferStatuses.CANCELLED
	assert "Expired 1 trade offers" in out.getvalue()


def test_next_expiry_is_earliest_pending(make_offer, make_product, bike, guitar, camera, alice):
	first = make_offer(bike, guitar)
	make_offer(camera, guitar)
	TradeOffer.objects.filter(pk=first.pk).update(expires_at=timezone.now() + timedelta(hours=2))

	next_expiry = OfferExpirySweeper.next_expiry()

	assert next_expiry == TradeOffer.objects.get(pk=first.pk).expires_at


def test_scheduler_wakes_early_for_the_next_expiry():
	scheduler = ExpiryScheduler(interval=3600)

	assert scheduler._calculate_delay(None) == 3600
	assert scheduler._calculate_delay(timezone.now() - timedelta(minutes=5)) == 1
	assert 590 <= scheduler._calculate_delay(timezone.now() + timedelta(minutes=10)) <= 600
	assert scheduler._calculate_delay(timezone.now() + timedelta(days=2)) == 3600


def test_scheduler_start_and_stop(monkeypatch):
	scheduler = ExpiryScheduler(interval=3600)
	monkeypatch.setattr(scheduler, "_process_and_schedule", lambda: None)

	scheduler.start()
	assert scheduler.running
	assert scheduler.timer is not None

	scheduler.stop()
	assert not scheduler.running
	assert scheduler.timer is None

import os

import pytest
from django.conf import settings
from rest_framework import status

from core.enums.product_statuses import ProductStatuses
from core.models import Product
from core.serializers import ProductSerializer
from core.views import ProductDetailView
from trade.enums.trade_offer_statuses import TradeOfferStatuses
from trade.exceptions import ProductNoLongerAvailable, ProductNotTradeable, ProductStatusChanged
from trade.models import TradeOffer

pytestmark = pytest.mark.django_db


def _edit(product, data):
	serializer = ProductSerializer(product, data=data, partial=True)
	serializer.is_valid(raise_exception=True)
	return serializer.save()


def _accepted_offers_on(product):
	return TradeOffer.objects.filter(status=TradeOfferStatuses.ACCEPTED, requested_product=product).count()


def test_edit_from_before_a_claim_keeps_product_sold(machine, make_offer, bike, guitar, camera, bob, carol):
	stale = Product.objects.get(pk=guitar.pk)
	competing = make_offer(camera, guitar)
	machine.accept(make_offer(bike, guitar).pk, bob.id)

	_edit(stale, {"title": "Renamed guitar", "description": "Barely played"})

	guitar.refresh_from_db()
	assert guitar.status == ProductStatuses.SOLD
	assert guitar.title == "Renamed guitar"
	assert stale.status == ProductStatuses.SOLD

	with pytest.raises(ProductNotTradeable):
		machine.create(camera.pk, guitar.pk, carol.id)

	# Even a pending offer that slipped past the cascade cannot claim the guitar again
	TradeOffer.objects.filter(pk=competing.pk).update(status=TradeOfferStatuses.PENDING, response_message="")
	with pytest.raises(ProductNoLongerAvailable):
		machine.accept(competing.pk, bob.id)

	assert _accepted_offers_on(guitar) == 1


def test_status_edit_from_before_a_claim_is_a_conflict(machine, make_offer, bike, guitar, bob):
	stale = Product.objects.get(pk=guitar.pk)
	machine.accept(make_offer(bike, guitar).pk, bob.id)

	with pytest.raises(ProductStatusChanged):
		_edit(stale, {"status": ProductStatuses.INACTIVE, "title": "Renamed guitar"})

	guitar.refresh_from_db()
	assert guitar.status == ProductStatuses.SOLD
	# The whole edit is rolled back with the status change
	assert guitar.title != "Renamed guitar"


def test_owner_status_edit_applies(guitar):
	_edit(guitar, {"status": ProductStatuses.RESERVED})

	guitar.refresh_from_db()
	assert guitar.status == ProductStatuses.RESERVED


def test_delete_from_before_a_claim_keeps_product_sold(machine, make_offer, bike, guitar, bob):
	stale = Product.objects.get(pk=guitar.pk)
	machine.accept(make_offer(bike, guitar).pk, bob.id)

	ProductDetailView().perform_destroy(stale)

	guitar.refresh_from_db()
	assert guitar.status == ProductStatuses.SOLD


def test_delete_hides_reserved_product(client_for, guitar, bob):
	Product.objects.filter(pk=guitar.pk).update(status=ProductStatuses.RESERVED)

	response = client_for(bob).delete(f"/products/{guitar.pk}/")

	assert response.status_code == status.HTTP_204_NO_CONTENT
	guitar.refresh_from_db()
	assert guitar.status == ProductStatuses.INACTIVE


def test_api_edit_of_sold_product_keeps_it_sold(client_for, machine, make_offer, bike, guitar, bob):
	machine.accept(make_offer(bike, guitar).pk, bob.id)

	response = client_for(bob).patch(f"/products/{guitar.pk}/", {"title": "Sold guitar"}, format="json")

	assert response.status_code == status.HTTP_200_OK
	assert response.json()["status"] == ProductStatuses.SOLD


@pytest.mark.skipif(
	settings.DATABASES["default"]["ENGINE"] != "django.db.backends.sqlite3",
	reason="only the SQLite test database is a local file",
)
def test_sqlite_test_database_is_per_process():
	assert str(os.getpid()) in settings.DATABASES["default"]["TEST"]["NAME"]

from django.conf.urls import include
from django.urls import path
from rest_framework import routers

from .views.smart_match import smart_matches_view
from .views.trade_action import TradeActionView
from .views.trade_offer import TradeOfferViewSet

router = routers.SimpleRouter()

router.register(r"", TradeOfferViewSet, basename="trade-offer")

urlpatterns = [
	path("trade-offers/actions/", TradeActionView.as_view(), name="trade-offer-actions"),
	path("trade-offers/smart-matches/<int:product_id>/", smart_matches_view, name="trade-offer-smart-matches"),
	path("trade-offers/", include(router.urls)),
]

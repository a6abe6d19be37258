from rest_framework.decorators import api_view
from rest_framework.request import Request
from rest_framework.response import Response

from core.serializers import ProductSerializer
from trade.services.matching import MatchingEngine


@api_view(["GET"])
def smart_matches_view(request: Request, product_id: int) -> Response:
	"""List other users' products worth offering for one of the requester's own products."""
	matches = MatchingEngine().find_matches(product_id, request.user.id)
	return Response({"product_id": product_id, "count": len(matches), "matches": ProductSerializer(matches, many=True).data})

from collections.abc import Sequence
from typing import Any

from django.db import DatabaseError, connection
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet


class HealthCheckViewSet(ViewSet):
	"""Reports whether the API process is up and can reach its database."""

	permission_classes = (AllowAny,)

	@staticmethod
	def list(*_: Sequence[Any], **__: dict[str, Any]) -> Response:
		"""
		Health check endpoint for the API.

		Returns:
			Response: 200 with the database state, or 503 when the database is unreachable.
		"""
		try:
			with connection.cursor() as cursor:
				cursor.execute("SELECT 1")

		except DatabaseError:
			return Response(data={"server": "up", "database": "down"}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

		return Response(data={"server": "up", "database": "up"}, status=status.HTTP_200_OK)

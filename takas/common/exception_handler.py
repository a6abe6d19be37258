import logging
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from trade.exceptions import ConflictError, TradeError

logger = logging.getLogger(__name__)


def trade_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
	"""
	Render trade engine errors with their kind and offending field.

	Django model validation errors become 400 responses; everything else is
	left to DRF's default handler.

	Args:
		exc: The raised exception.
		context: DRF handler context (view, request, ...).

	Returns:
		Response | None: The error response, or None to let the exception propagate.
	"""
	if isinstance(exc, TradeError):
		if isinstance(exc, ConflictError):
			logger.warning(f"Trade conflict in {context.get('view').__class__.__name__}: {exc.kind} - {exc.message}")

		return Response({"error": exc.as_dict()}, status=exc.status_code)

	if isinstance(exc, DjangoValidationError):
		detail = exc.message_dict if hasattr(exc, "error_dict") else {"non_field_errors": exc.messages}
		return Response(
			{"error": {"kind": "ValidationError", "code": "invalid", "message": "; ".join(exc.messages), "detail": detail}},
			status=status.HTTP_400_BAD_REQUEST,
		)

	return exception_handler(exc, context)

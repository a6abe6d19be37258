"""Errors raised by the trade-offer engine.

Every error carries a machine-readable ``code``, the HTTP status the API
should answer with, and optionally the request ``field`` that caused it, so
callers can render a precise message without parsing text.
"""

from __future__ import annotations

from typing import Any


class TradeError(Exception):
	"""Base class for all trade-offer engine errors."""

	status_code = 400
	default_message = "The trade request could not be processed."
	code = "trade_error"

	def __init__(self, message: str | None = None, *, field: str | None = None) -> None:
		"""
		Initialize the error.

		Args:
			message: Human-readable message. Defaults to ``default_message``.
			field: Name of the offending request field, if any.
		"""
		self.message = message or self.default_message
		self.field = field
		super().__init__(self.message)

	@property
	def kind(self) -> str:
		"""The error class name, e.g. ``ProductNotOwned``."""
		return type(self).__name__

	def as_dict(self) -> dict[str, Any]:
		"""
		Serialize the error for an API response.

		Returns:
			dict[str, Any]: ``kind``, ``code``, ``message`` and ``field``.
		"""
		return {"kind": self.kind, "code": self.code, "message": self.message, "field": self.field}


# Malformed or illegal requests


class ValidationError(TradeError):
	status_code = 400
	default_message = "The trade request is not valid."
	code = "validation_error"


class SelfTradeNotAllowed(ValidationError):
	default_message = "You cannot make a trade offer for your own product."
	code = "self_trade_not_allowed"


class ProductNotTradeable(ValidationError):
	default_message = "This product is not available for trade offers."
	code = "product_not_tradeable"


class ProductNotOwned(ValidationError):
	default_message = "The offered product does not belong to you."
	code = "product_not_owned"


class InvalidCashOffer(ValidationError):
	default_message = "The additional cash offer cannot be negative."
	code = "invalid_cash_offer"


class NotEligibleForMatching(ValidationError):
	default_message = "Smart matches are only available for your own products that accept trade offers."
	code = "not_eligible_for_matching"


# Legal shape, illegal given current state


class InvalidStateTransition(TradeError):
	status_code = 409
	default_message = "This action is not allowed in the offer's current state."
	code = "invalid_state_transition"


class OfferExpired(InvalidStateTransition):
	default_message = "This trade offer has expired."
	code = "offer_expired"


class ParentOfferNotPending(InvalidStateTransition):
	default_message = "Counter-offers can only be made against a pending offer."
	code = "parent_offer_not_pending"


class ChainTooDeep(InvalidStateTransition):
	default_message = "The counter-offer chain is too deep to display."
	code = "chain_too_deep"


# Lost a race


class ConflictError(TradeError):
	status_code = 409
	default_message = "The trade offer was changed by someone else."
	code = "conflict"


class OfferAlreadyResolved(ConflictError):
	default_message = "This trade offer has already been resolved."
	code = "offer_already_resolved"


class ProductNoLongerAvailable(ConflictError):
	default_message = "This item was just claimed by another trade."
	code = "product_no_longer_available"


class ProductStatusChanged(ConflictError):
	default_message = "The product's status was changed by someone else. Reload it and try again."
	code = "product_status_changed"


# Unknown ids


class NotFoundError(TradeError):
	status_code = 404
	default_message = "Not found."
	code = "not_found"


class OfferNotFound(NotFoundError):
	default_message = "Trade offer not found."
	code = "offer_not_found"


class ProductNotFound(NotFoundError):
	default_message = "Product not found."
	code = "product_not_found"


# Wrong actor


class AuthorizationError(TradeError):
	status_code = 403
	default_message = "You are not allowed to perform this action."
	code = "not_authorized"


class NotOfferParty(AuthorizationError):
	default_message = "Only a party of the trade offer can perform this action."
	code = "not_offer_party"

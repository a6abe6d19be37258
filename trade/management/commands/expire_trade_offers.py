import logging
from collections.abc import Sequence
from typing import Any

from django.core.management.base import BaseCommand
from django.utils import timezone

from trade.services.expiry import OfferExpirySweeper

logger = logging.getLogger(__name__)


class Command(BaseCommand):
	"""Cancel pending trade offers whose expiry date has passed."""

	help = "Cancel pending trade offers whose expiry date has passed"

	def add_arguments(self, parser) -> None:  # noqa: ANN001, D102, PLR6301
		parser.add_argument(
			"--verbose",
			action="store_true",
			help="Enable verbose logging",
			default=False,
		)

	def handle(self, *_: Sequence[Any], **options: dict[str, Any]) -> None:  # noqa: D102
		verbose: bool = options["verbose"] or False  # pyright: ignore[reportAssignmentType]
		started_at = timezone.now()

		if verbose:
			self.stdout.write(f"Starting trade offer expiry sweep at {started_at}")

		expired = OfferExpirySweeper().sweep(started_at)

		if verbose:
			self.stdout.write(
				self.style.SUCCESS(f"Expiry sweep completed at {timezone.now()}. Expired {len(expired)} trade offers."),
			)
		elif expired:
			self.stdout.write(self.style.SUCCESS(f"Expired {len(expired)} trade offers"))

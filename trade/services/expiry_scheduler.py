import logging
import threading
from datetime import datetime
from typing import Optional

from django.core.management import call_command
from django.utils import timezone

from takas.settings import TRADE_SETTINGS

logger = logging.getLogger(__name__)


class ExpiryScheduler:
	def __init__(self, interval: Optional[float] = None) -> None:
		"""Initialize the offer expiry scheduler."""
		self.interval = interval or TRADE_SETTINGS.EXPIRY_SWEEP_INTERVAL_SECONDS
		self.running = False
		self.timer = None
		self.lock = threading.Lock()

	def start(self) -> None:
		"""Start the offer expiry scheduler."""
		with self.lock:
			if self.running:
				return

			self.running = True
			logger.debug("Trade offer expiry scheduler started")

			self._schedule(1.0)  # Delay initial database access to avoid AppConfig.ready() warning

	def stop(self) -> None:
		"""Stop the offer expiry scheduler."""
		with self.lock:
			self.running = False
			if self.timer:
				self.timer.cancel()
				self.timer = None
			logger.debug("Trade offer expiry scheduler stopped")

	def _schedule(self, delay_seconds: float) -> None:
		self.timer = threading.Timer(delay_seconds, self._process_and_schedule)
		self.timer.daemon = True
		self.timer.start()

	def _process_and_schedule(self) -> None:
		"""Expire overdue offers and schedule the next wake time."""
		if not self.running:
			return

		try:
			call_command("expire_trade_offers", verbose=False)

			delay_seconds = self._calculate_delay(self._calculate_next_wake_time())
			logger.debug(f"Scheduling next expiry sweep in {delay_seconds:.1f} seconds")

			self._schedule(delay_seconds)

		except Exception:
			logger.exception("Error in trade offer expiry scheduler:")
			# On error, retry in 1 minute
			if self.running:
				self._schedule(60)

	def _calculate_delay(self, next_wake_time: Optional[datetime]) -> float:
		"""Seconds until the next sweep: the next expiry if it is sooner than the interval."""  # noqa: DOC201
		if next_wake_time is None:
			return self.interval

		delay_seconds = (next_wake_time - timezone.now()).total_seconds()
		return min(self.interval, max(1, delay_seconds))  # Minimum 1 second delay

	@staticmethod
	def _calculate_next_wake_time() -> Optional[datetime]:
		"""Calculate when the next pending offer expires."""  # noqa: DOC201
		from trade.services.expiry import OfferExpirySweeper  # noqa: PLC0415

		try:
			return OfferExpirySweeper.next_expiry()

		except Exception:
			logger.exception("Error calculating next wake time:")
			return None


# Global scheduler instance
scheduler = ExpiryScheduler()


def start_expiry_scheduler() -> None:
	"""Start the global scheduler."""
	scheduler.start()


def stop_expiry_scheduler() -> None:
	"""Stop the global scheduler."""
	scheduler.stop()

import sys

from django.apps import AppConfig


class TradeConfig(AppConfig):
	default_auto_field = "django.db.models.BigAutoField"
	name = "trade"

	def ready(self) -> None:
		"""Start the offer expiry scheduler when serving requests."""
		from takas.settings import ENV  # noqa: PLC0415

		if not ENV.RUN_EXPIRY_SCHEDULER:
			return

		if "runserver" in sys.argv or "gunicorn" in sys.argv[0]:
			from .services.expiry_scheduler import start_expiry_scheduler  # noqa: PLC0415

			start_expiry_scheduler()

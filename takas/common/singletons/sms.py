from functools import lru_cache

from core.services.sms import SMSService


@lru_cache(maxsize=1)
def get_sms_service() -> SMSService:
	"""Get the process-wide ClickSend SMS client, built on first use."""  # noqa: DOC201
	return SMSService()

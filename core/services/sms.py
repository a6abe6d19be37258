import logging

import clicksend_client
from clicksend_client import SmsMessage
from clicksend_client.rest import ApiException

from takas.settings import ENV

logger = logging.getLogger(__name__)


class SMSService:
	def __init__(self) -> None:
		"""Initialize ClickSend SMS API client."""
		self.configuration = clicksend_client.Configuration()
		self.configuration.username = ENV.CLICKSEND_USERNAME
		self.configuration.password = ENV.CLICKSEND_API_KEY

		self.api_instance = clicksend_client.SMSApi(clicksend_client.ApiClient(self.configuration))

	def send_sms(self, message: str, phone_number: str) -> bool:
		"""
		Send an SMS message.

		Args:
			message (str): The message body to send.
			phone_number (str): The recipient's phone number.

		Returns:
			bool: True if the message was sent successfully, False otherwise.
		"""
		sms_message = SmsMessage(
			source="Takas",
			body=message,
			to=phone_number,
		)

		sms_messages = clicksend_client.SmsMessageCollection(messages=[sms_message])

		try:
			self.api_instance.sms_send_post(sms_messages)

		except ApiException:
			logger.exception(f"Could not send SMS to {phone_number[-4:].rjust(len(phone_number), '*')}")
			return False

		else:
			return True

import logging
from typing import Optional

import httpx

from config import settings

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"

RESET_EMAIL_HTML = """\
<h1>Password Reset</h1>
<p>Click the link below to reset your password:</p>
<a href="{link}">Reset Password</a>
"""


class Mailer:
    """Best-effort mail delivery through the Resend HTTP API.

    Sending never raises: transport failures and rejected messages are
    logged and reported through the boolean return value.
    """

    def __init__(
        self,
        api_key: Optional[str],
        sender: Optional[str],
        timeout: float = 20,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.sender)

    async def send_email(self, to_email: str, subject: str, html: str) -> bool:
        if not self.configured:
            logger.warning("Email service not configured. Skipping email send.")
            return False

        async with httpx.AsyncClient(transport=self.transport) as client:
            try:
                response = await client.post(
                    RESEND_URL,
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "from": self.sender,
                        "to": [to_email],
                        "subject": subject,
                        "html": html,
                    },
                    timeout=self.timeout,
                )
            except httpx.RequestError as exc:
                logger.error("Error while sending email: %s", exc)
                return False

        if response.status_code not in (200, 201):
            logger.error("Failed to send email via Resend: %s", response.text)
            return False

        logger.info("Email '%s' sent", subject)
        return True

    async def send_password_reset_email(self, to_email: str, reset_link: str) -> bool:
        return await self.send_email(
            to_email,
            "Password Reset Request",
            RESET_EMAIL_HTML.format(link=reset_link),
        )


def get_mailer() -> Mailer:
    return Mailer(settings.RESEND_API_KEY, settings.RESEND_FROM)

import logging
import re
from typing import List, Union

import requests

from storefront.config import settings

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


class EmailDeliveryError(Exception):
    """The provider was reachable in principle but the message was not accepted."""


def is_configured() -> bool:
    return bool(settings.BREVO_API_KEY)


def is_valid_email(email):
    if isinstance(email, list):
        return all(is_valid_email(e) for e in email)

    if not email:
        return False

    return re.match(r"[^@]+@[^@]+\.[^@]+", email) is not None


def send_email(to: Union[str, List[str]], subject: str, html: str) -> bool:
    """
    Send email via Brevo.

    Returns False when there is nothing to do (provider not configured, no
    valid recipient). Raises EmailDeliveryError when the send itself fails.
    """
    if not is_configured():
        logger.info(f"Email provider not configured, skipping '{subject}'")
        return False

    # Normalize emails into a list
    recipients = to if isinstance(to, list) else [to]
    valid_emails = [e for e in recipients if is_valid_email(e)]

    if not valid_emails:
        logger.warning(f"No valid emails found: {to}")
        return False

    payload = {
        "sender": {
            "email": settings.MAIL_FROM,
            "name": settings.STORE_NAME,
        },
        "to": [{"email": email} for email in valid_emails],
        "subject": subject,
        "htmlContent": html,
    }

    headers = {
        "api-key": settings.BREVO_API_KEY,
        "Content-Type": "application/json",
    }

    try:
        response = requests.post(
            BREVO_API_URL,
            json=payload,
            headers=headers,
            timeout=10,
        )
    except requests.RequestException as exc:
        raise EmailDeliveryError(f"Brevo request failed: {exc}") from exc

    if response.status_code >= 400:
        raise EmailDeliveryError(
            f"Brevo email failed ({response.status_code}): {response.text}"
        )

    logger.info(f"Brevo email sent to {valid_emails}")
    return True

import time
import random
import logging

from storefront.config import settings
from storefront.services import email_service

logger = logging.getLogger(__name__)


def send_email_with_retry(
    to_email,
    subject: str,
    html: str,
    max_retries: int = None,
) -> bool:
    max_retries = max_retries or settings.EMAIL_MAX_RETRIES
    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            sent = email_service.send_email(to=to_email, subject=subject, html=html)
            if sent:
                logger.info(f"Email sent to {to_email} (attempt {attempt})")
            return sent

        except email_service.EmailDeliveryError as e:
            last_error = str(e)
            logger.warning(f"Attempt {attempt} failed: {last_error}")

            if "api-key" in last_error.lower() or "(401)" in last_error:
                break  # auth error, no retry

            if attempt < max_retries:
                time.sleep((2 ** attempt) + random.random())

    logger.error(f"Email permanently failed: {last_error}")
    return False

# storefront/notifications/email_handlers.py
from storefront.config import settings
from storefront.services.email_retry import send_email_with_retry
from storefront.utils.template import render_template


def send_user_email(template, subject, to, **ctx) -> bool:
    html = render_template(template, store_name=settings.STORE_NAME, **ctx)
    return send_email_with_retry(to_email=to, subject=subject, html=html)


def send_admin_email(template, subject, **ctx) -> bool:
    if not settings.ADMIN_EMAILS:
        return False
    html = render_template(template, store_name=settings.STORE_NAME, **ctx)
    return send_email_with_retry(to_email=settings.ADMIN_EMAILS, subject=subject, html=html)

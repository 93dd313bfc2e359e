# storefront/notifications/rules.py
from storefront.notifications.events import OrderEvent
from storefront.notifications.channels import Channel


NOTIFICATION_RULES = {
    OrderEvent.ORDER_PLACED: {
        Channel.EMAIL_USER: True,
        Channel.EMAIL_ADMIN: True,
    },
    OrderEvent.STATUS_UPDATED: {
        Channel.EMAIL_USER: True,
    },
}

TEMPLATES = {
    OrderEvent.ORDER_PLACED: {
        Channel.EMAIL_USER: "user_emails/order_confirmation.html",
        Channel.EMAIL_ADMIN: "admin_emails/new_order.html",
    },
    OrderEvent.STATUS_UPDATED: {
        Channel.EMAIL_USER: "user_emails/order_status_update.html",
    },
}

from storefront.models.user import User
from storefront.models.product import Product
from storefront.models.address import Address
from storefront.models.order_item import OrderItem
from storefront.models.order_history import OrderHistory
from storefront.models.order import Order, OrderStatus, PaymentStatus

# add ALL models here

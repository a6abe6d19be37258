from .category import Category
from .notification import Notification
from .product import Product
from .user import User

__all__ = [
	"Category",
	"Notification",
	"Product",
	"User",
]

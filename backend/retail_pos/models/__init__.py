from .inventory import Product
from .sales import Transaction
from .auth import User, ROLE_ADMIN, ROLE_STAFF, ROLES

__all__ = [
    'Product',
    'Transaction',
    'User', 'ROLE_ADMIN', 'ROLE_STAFF', 'ROLES',
]

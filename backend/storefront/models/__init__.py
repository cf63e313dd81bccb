from .auth import User, SessionToken, ROLES
from .catalog import Category, Product
from .inventory import InventoryLog, INVENTORY_LOG_TYPES
from .sales import Sale, SaleItem, PAYMENT_METHODS, PAYMENT_STATUSES, SALE_STATUSES, WALK_IN_CUSTOMER
from .activity import ActivityLog, ACTIVITY_ACTIONS, ACTIVITY_MODULES, ACTIVITY_STATUSES
from .documents import DocumentSequence

__all__ = [
    'User', 'SessionToken', 'ROLES',
    'Category', 'Product',
    'InventoryLog', 'INVENTORY_LOG_TYPES',
    'Sale', 'SaleItem', 'PAYMENT_METHODS', 'PAYMENT_STATUSES', 'SALE_STATUSES', 'WALK_IN_CUSTOMER',
    'ActivityLog', 'ACTIVITY_ACTIONS', 'ACTIVITY_MODULES', 'ACTIVITY_STATUSES',
    'DocumentSequence',
]

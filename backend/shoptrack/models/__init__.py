from .auth import User, QRToken
from .inventory import ShelfLocation, Product, Component
from .requests import ComponentRequest, FulfillmentLog
from .audit import ProductEvent, ActivityLog

__all__ = [
    'User', 'QRToken',
    'ShelfLocation', 'Product', 'Component',
    'ComponentRequest', 'FulfillmentLog',
    'ProductEvent', 'ActivityLog',
]

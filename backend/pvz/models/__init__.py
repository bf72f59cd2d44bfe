from .pickup_points import PickupPoint
from .receptions import Reception, RECEPTION_STATUSES, STATUS_IN_PROGRESS, STATUS_CLOSED
from .products import Product, PRODUCT_TYPES
from .audit import AuditEvent

__all__ = [
    'PickupPoint',
    'Reception', 'RECEPTION_STATUSES', 'STATUS_IN_PROGRESS', 'STATUS_CLOSED',
    'Product', 'PRODUCT_TYPES',
    'AuditEvent',
]

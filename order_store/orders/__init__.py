"""
Module Orders - Schéma, index et stockage des commandes
"""

# Exposer les éléments principaux pour faciliter les imports
from order_store.orders.domain.entities import (
    OrderDocument, OrderItemDocument, OrderRecord, OrderStatus, ShippingAddress
)
from order_store.orders.exceptions import (
    OrderStoreException, OrderSchemaViolation, OrderIndexError,
    OrderProvisioningError, OrderNotFoundException
)
from order_store.orders.service import OrderStoreSchema
from order_store.orders.validators import validate_order_document

__all__ = [
    "OrderDocument", "OrderItemDocument", "OrderRecord", "OrderStatus", "ShippingAddress",
    "OrderStoreException", "OrderSchemaViolation", "OrderIndexError",
    "OrderProvisioningError", "OrderNotFoundException",
    "OrderStoreSchema", "validate_order_document",
]

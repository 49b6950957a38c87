"""
Configuration spécifique au module Orders.
Contient les constantes du contrat de données de la collection des commandes:
champs obligatoires et définition des index secondaires.
"""

from typing import Any, Dict, List

REQUIRED_ORDER_FIELDS: List[str] = ["userId", "items", "status", "totalAmount", "createdAt"]

# Tables de la collection
ORDERS_TABLE: str = "orders"
ORDER_ITEMS_TABLE: str = "order_items"

# Index secondaires: clés (colonne, sens) avec 1 = ascendant, -1 = descendant.
# L'index sur order_items.product_id joue le rôle d'index multikey sur items.productId
# (une entrée par élément du tableau).
ORDER_INDEX_DEFINITIONS: List[Dict[str, Any]] = [
    {"name": "ix_orders_user_id", "table": ORDERS_TABLE, "keys": [("user_id", 1)]},
    {"name": "ix_orders_status", "table": ORDERS_TABLE, "keys": [("status", 1)]},
    {"name": "ix_orders_created_at_desc", "table": ORDERS_TABLE, "keys": [("created_at", -1)]},
    {"name": "ix_orders_user_id_status", "table": ORDERS_TABLE, "keys": [("user_id", 1), ("status", 1)]},
    {"name": "ix_order_items_product_id", "table": ORDER_ITEMS_TABLE, "keys": [("product_id", 1)]},
    {"name": "ix_orders_total_amount", "table": ORDERS_TABLE, "keys": [("total_amount", 1)]},
]

# Pagination des listes de commandes
MAX_PAGE_SIZE: int = 100

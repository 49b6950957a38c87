from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import CheckConstraint, Column, DateTime, Index
from sqlmodel import Field, Relationship, SQLModel

from order_store.orders.config import (
    ORDER_INDEX_DEFINITIONS,
    ORDER_ITEMS_TABLE,
    ORDERS_TABLE,
)
from order_store.orders.domain.entities import OrderStatus

_STATUS_SQL_LIST = ", ".join(f"'{status.value}'" for status in OrderStatus)

# --- Modèle de table pour Order ---

class Order(SQLModel, table=True):
    """Modèle de table pour les commandes (champs scalaires + adresse de livraison aplatie)."""
    __tablename__ = ORDERS_TABLE
    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_SQL_LIST})", name="ck_orders_status_allowed"),
        CheckConstraint("length(user_id) > 0", name="ck_orders_user_id_not_empty"),
        CheckConstraint("total_amount >= 0", name="ck_orders_total_amount_non_negative"),
        CheckConstraint("tax_amount IS NULL OR tax_amount >= 0", name="ck_orders_tax_amount_non_negative"),
        CheckConstraint("shipping_amount IS NULL OR shipping_amount >= 0", name="ck_orders_shipping_amount_non_negative"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(nullable=False)
    status: str = Field(max_length=20, nullable=False)
    total_amount: float = Field(nullable=False)
    tax_amount: Optional[float] = Field(default=None)
    shipping_amount: Optional[float] = Field(default=None)
    shipping_street: Optional[str] = Field(default=None)
    shipping_city: Optional[str] = Field(default=None)
    shipping_postal_code: Optional[str] = Field(default=None)
    shipping_country: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))

    # Relations
    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={
            "order_by": "OrderItem.position",
            "cascade": "all, delete-orphan",
            "lazy": "selectin",
        },
    )

# --- Modèle de table pour OrderItem ---

class OrderItem(SQLModel, table=True):
    """Modèle de table pour les lignes de commande (une ligne par élément de `items`)."""
    __tablename__ = ORDER_ITEMS_TABLE
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_min"),
        CheckConstraint("unit_price >= 0", name="ck_order_items_unit_price_non_negative"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: Optional[int] = Field(default=None, foreign_key=f"{ORDERS_TABLE}.id", index=True)
    # Rang de l'article dans le tableau `items` du document
    position: int = Field(nullable=False)
    product_id: str = Field(nullable=False)
    product_name: str = Field(nullable=False)
    quantity: int = Field(nullable=False)
    unit_price: float = Field(nullable=False)
    description: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None)

    order: Optional[Order] = Relationship(back_populates="items")

# --- Index secondaires ---

def _index_from_definition(definition: Dict[str, Any]) -> Index:
    table = SQLModel.metadata.tables[definition["table"]]
    expressions = [
        table.c[column].desc() if direction < 0 else table.c[column]
        for column, direction in definition["keys"]
    ]
    return Index(definition["name"], *expressions)


# Attachés aux tables: créés avec elles, puis vérifiés par OrderStoreSchema.ensure_indexes()
ORDER_INDEXES: List[Index] = [_index_from_definition(d) for d in ORDER_INDEX_DEFINITIONS]

ORDER_TABLES = [Order.__table__, OrderItem.__table__]

# Champ du document protégé par chaque contrainte de la base
CONSTRAINT_FIELDS: Dict[str, str] = {
    "ck_orders_status_allowed": "status",
    "ck_orders_user_id_not_empty": "userId",
    "ck_orders_total_amount_non_negative": "totalAmount",
    "ck_orders_tax_amount_non_negative": "taxAmount",
    "ck_orders_shipping_amount_non_negative": "shippingAmount",
    "ck_order_items_quantity_min": "items.quantity",
    "ck_order_items_unit_price_non_negative": "items.unitPrice",
}

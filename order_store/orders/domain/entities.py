from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from order_store.orders.utils import as_utc

# Entités du Domaine "Orders": la forme des documents persistés.
# Les clés des documents sont en camelCase (alias), les attributs Python en snake_case.
# Les champs scalaires sont stricts: aucune conversion silencieuse ("2" n'est pas 2).
# Les montants sont des doubles: un entier (20) est refusé plutôt qu'élargi en 20.0.

DOCUMENT_CONFIG = ConfigDict(
    populate_by_name=True,
    extra="forbid",
    use_enum_values=True,
)


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


def _reject_integer_amount(value: Any) -> Any:
    # bool est une sous-classe de int
    if isinstance(value, int):
        raise ValueError("un montant doit être un nombre décimal (float), pas un entier")
    return value


class ShippingAddress(BaseModel):
    model_config = DOCUMENT_CONFIG

    street: str = Field(..., strict=True)
    city: str = Field(..., strict=True)
    postal_code: str = Field(..., alias="postalCode", strict=True)
    country: str = Field(..., strict=True)


class OrderItemDocument(BaseModel):
    model_config = DOCUMENT_CONFIG

    product_id: str = Field(..., alias="productId", strict=True)
    product_name: str = Field(..., alias="productName", strict=True)
    quantity: int = Field(..., ge=1, strict=True)
    unit_price: float = Field(..., alias="unitPrice", ge=0, strict=True)
    description: Optional[str] = Field(default=None, strict=True)
    category: Optional[str] = Field(default=None, strict=True)

    @field_validator("unit_price", mode="before")
    @classmethod
    def reject_integer_price(cls, value: Any) -> Any:
        return _reject_integer_amount(value)


class OrderDocument(BaseModel):
    """Document de commande validé, tel qu'il est stocké et relu."""
    model_config = DOCUMENT_CONFIG

    user_id: str = Field(..., alias="userId", min_length=1, strict=True)
    items: List[OrderItemDocument] = Field(..., min_length=1)
    status: OrderStatus
    total_amount: float = Field(..., alias="totalAmount", ge=0, strict=True)
    tax_amount: Optional[float] = Field(default=None, alias="taxAmount", ge=0, strict=True)
    shipping_amount: Optional[float] = Field(default=None, alias="shippingAmount", ge=0, strict=True)
    shipping_address: Optional[ShippingAddress] = Field(default=None, alias="shippingAddress")
    notes: Optional[str] = Field(default=None, strict=True)
    created_at: datetime = Field(..., alias="createdAt", strict=True)
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt", strict=True)

    @field_validator("total_amount", "tax_amount", "shipping_amount", mode="before")
    @classmethod
    def reject_integer_amounts(cls, value: Any) -> Any:
        return _reject_integer_amount(value)

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    def to_document(self) -> Dict[str, Any]:
        """Retourne le document avec ses clés camelCase, sans les champs optionnels absents."""
        return self.model_dump(by_alias=True, exclude_none=True)


class OrderRecord(BaseModel):
    """Commande persistée: identifiant de stockage + document."""
    id: int
    document: OrderDocument

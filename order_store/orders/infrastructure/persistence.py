import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from order_store.orders.config import MAX_PAGE_SIZE
from order_store.orders.domain.entities import OrderDocument, OrderRecord, OrderStatus
from order_store.orders.domain.repositories import AbstractOrderRepository
from order_store.orders.exceptions import OrderNotFoundException, OrderSchemaViolation
from order_store.orders.models import CONSTRAINT_FIELDS, Order, OrderItem
from order_store.orders.utils import as_utc
from order_store.orders.validators import validate_order_document

logger = logging.getLogger(__name__)

# Attribut Python -> clé du document (ex: user_id -> userId)
_DOCUMENT_KEYS: Dict[str, str] = {
    name: field.alias or name for name, field in OrderDocument.model_fields.items()
}


def violation_from_integrity_error(error: IntegrityError) -> OrderSchemaViolation:
    """Traduit un refus de la base (contrainte CHECK / NOT NULL) en violation de schéma."""
    message = str(error.orig)
    for constraint, field in CONSTRAINT_FIELDS.items():
        if constraint in message:
            return OrderSchemaViolation(field=field, reason=f"contrainte '{constraint}' non respectée")
    return OrderSchemaViolation(field="document", reason=message)


def _order_columns(document: OrderDocument) -> Dict[str, Any]:
    address = document.shipping_address
    return {
        "user_id": document.user_id,
        "status": document.status,
        "total_amount": document.total_amount,
        "tax_amount": document.tax_amount,
        "shipping_amount": document.shipping_amount,
        "shipping_street": address.street if address else None,
        "shipping_city": address.city if address else None,
        "shipping_postal_code": address.postal_code if address else None,
        "shipping_country": address.country if address else None,
        "notes": document.notes,
        "created_at": document.created_at,
        "updated_at": document.updated_at,
    }


def _item_rows(document: OrderDocument) -> List[OrderItem]:
    return [
        OrderItem(
            position=position,
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            description=item.description,
            category=item.category,
        )
        for position, item in enumerate(document.items)
    ]


def _to_record(order_db: Order) -> OrderRecord:
    """Reconstruit le document à partir des lignes stockées."""
    data: Dict[str, Any] = {
        "userId": order_db.user_id,
        "items": [
            {
                "productId": item.product_id,
                "productName": item.product_name,
                "quantity": item.quantity,
                "unitPrice": item.unit_price,
                "description": item.description,
                "category": item.category,
            }
            for item in sorted(order_db.items, key=lambda i: i.position)
        ],
        "status": order_db.status,
        "totalAmount": order_db.total_amount,
        "taxAmount": order_db.tax_amount,
        "shippingAmount": order_db.shipping_amount,
        "notes": order_db.notes,
        "createdAt": as_utc(order_db.created_at),
        "updatedAt": as_utc(order_db.updated_at),
    }
    if order_db.shipping_street is not None:
        data["shippingAddress"] = {
            "street": order_db.shipping_street,
            "city": order_db.shipping_city,
            "postalCode": order_db.shipping_postal_code,
            "country": order_db.shipping_country,
        }
    return OrderRecord(id=order_db.id, document=OrderDocument.model_validate(data))


class SQLAlchemyOrderRepository(AbstractOrderRepository):
    """
    Implémentation SQLAlchemy du repository de Commandes.

    Toute écriture (ajout ou mise à jour) passe par le validateur de schéma avant
    d'atteindre la base; la base applique en plus ses propres contraintes.
    Les écritures sont flushées dans la session de l'appelant, qui gère le commit.
    """

    def __init__(self, session: AsyncSession, reject_updated_before_created: bool = False):
        self.session = session
        self.reject_updated_before_created = reject_updated_before_created

    def _validate(self, document: Any) -> OrderDocument:
        return validate_order_document(document, reject_updated_before_created=self.reject_updated_before_created)

    async def _flush(self, action: str) -> None:
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            logger.error(f"Erreur intégrité {action}: {e}", exc_info=True)
            raise violation_from_integrity_error(e) from e
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Erreur inattendue {action}: {e}", exc_info=True)
            raise

    async def _get_order_db(self, order_id: int) -> Optional[Order]:
        stmt = select(Order).where(Order.id == order_id).options(selectinload(Order.items))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, document: Any) -> OrderRecord:
        order_document = self._validate(document)
        order_db = Order(**_order_columns(order_document))
        order_db.items = _item_rows(order_document)
        self.session.add(order_db)

        await self._flush(f"ajout commande pour user {order_document.user_id}")
        logger.info(f"Commande ID {order_db.id} ajoutée pour user {order_db.user_id} ({len(order_document.items)} article(s)).")
        return OrderRecord(id=order_db.id, document=order_document)

    async def get_by_id(self, order_id: int) -> Optional[OrderRecord]:
        order_db = await self._get_order_db(order_id)
        if not order_db:
            logger.debug(f"Commande ID {order_id} non trouvée dans get_by_id().")
            return None
        return _to_record(order_db)

    async def update(self, order_id: int, changes: Mapping[str, Any]) -> OrderRecord:
        """
        Fusionne `changes` dans le document stocké puis revalide le document complet.
        Une valeur None retire un champ optionnel; `items` est remplacé en entier.
        """
        order_db = await self._get_order_db(order_id)
        if not order_db:
            logger.warning(f"Tentative MAJ commande ID {order_id} non trouvée.")
            raise OrderNotFoundException(order_id=order_id)

        changes = {_DOCUMENT_KEYS.get(key, key): value for key, value in changes.items()}
        merged = _to_record(order_db).document.to_document()
        merged.update(changes)
        # Rejet avant toute modification de l'objet: pas d'écriture partielle
        order_document = self._validate(merged)

        for column, value in _order_columns(order_document).items():
            setattr(order_db, column, value)
        if "items" in changes:
            order_db.items = _item_rows(order_document)

        await self._flush(f"MAJ commande {order_id}")
        logger.info(f"Commande ID {order_id} mise à jour (champs: {', '.join(sorted(changes))}).")
        return OrderRecord(id=order_id, document=order_document)

    async def list_by_user(
        self,
        user_id: str,
        status: Optional[OrderStatus] = None,
        newest_first: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[OrderRecord]:
        """
        Liste les commandes d'un utilisateur (index user_id / (user_id, status)).

        Sans `limit`, toutes les commandes correspondantes sont retournées; une page
        demandée est plafonnée à MAX_PAGE_SIZE. L'ordre est stable (id croissant, ou
        createdAt décroissant puis id avec `newest_first`).
        """
        stmt = select(Order).where(Order.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Order.status == getattr(status, "value", status))
        if newest_first:
            stmt = stmt.order_by(Order.created_at.desc(), Order.id)
        else:
            stmt = stmt.order_by(Order.id)
        if limit is not None:
            stmt = stmt.limit(min(limit, MAX_PAGE_SIZE))
        stmt = stmt.options(selectinload(Order.items)).offset(offset)

        result = await self.session.execute(stmt)
        return [_to_record(o_db) for o_db in result.scalars().all()]

    async def list_by_product(self, product_id: str) -> List[OrderRecord]:
        """Liste les commandes contenant le produit (index order_items.product_id)."""
        order_ids = select(OrderItem.order_id).where(OrderItem.product_id == product_id)
        stmt = (
            select(Order)
            .where(Order.id.in_(order_ids))
            .options(selectinload(Order.items))
            .order_by(Order.id)
        )
        result = await self.session.execute(stmt)
        return [_to_record(o_db) for o_db in result.scalars().all()]

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Order))
        return result.scalar_one()

    async def query_plan_for_user_status(self, user_id: str, status: str) -> List[str]:
        """Plan d'exécution de la requête dominante « commandes d'un utilisateur par statut »."""
        dialect = self.session.get_bind().dialect.name
        prefix = "EXPLAIN QUERY PLAN" if dialect == "sqlite" else "EXPLAIN"
        stmt = text(f"{prefix} SELECT id FROM {Order.__tablename__} WHERE user_id = :user_id AND status = :status")
        result = await self.session.execute(stmt, {"user_id": user_id, "status": status})
        return [str(row[-1]) for row in result]

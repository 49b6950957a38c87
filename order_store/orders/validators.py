import logging
from typing import Any, Tuple, Union

from pydantic import ValidationError

from order_store.orders.domain.entities import OrderDocument
from order_store.orders.exceptions import OrderSchemaViolation

logger = logging.getLogger(__name__)


def _field_path(loc: Tuple[Union[str, int], ...]) -> str:
    """Chemin pointé du champ fautif, ex: ('items', 0, 'quantity') -> 'items.0.quantity'."""
    return ".".join(str(part) for part in loc) or "document"


def validate_order_document(document: Any, reject_updated_before_created: bool = False) -> OrderDocument:
    """
    Valide un document de commande contre le schéma de la collection.

    - Vérifie les champs obligatoires, les types, l'énumération du statut, les bornes
      numériques et chaque article de `items`.
    - Lève OrderSchemaViolation sur la première violation rencontrée (champ + raison).
    - `updatedAt` antérieur à `createdAt` est seulement signalé, sauf si
      `reject_updated_before_created` est activé.
    """
    try:
        order = OrderDocument.model_validate(document)
    except ValidationError as e:
        error = e.errors()[0]
        field = _field_path(error["loc"])
        logger.info(f"Document de commande rejeté: {field} - {error['msg']} ({e.error_count()} erreur(s))")
        raise OrderSchemaViolation(field=field, reason=error["msg"]) from e

    if order.updated_at is not None and order.updated_at < order.created_at:
        if reject_updated_before_created:
            raise OrderSchemaViolation(field="updatedAt", reason="doit être postérieure ou égale à createdAt")
        logger.warning(f"Commande de l'utilisateur {order.user_id}: updatedAt ({order.updated_at}) antérieure à createdAt ({order.created_at}).")

    return order

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional

from .entities import OrderRecord, OrderStatus


class AbstractOrderRepository(ABC):
    """Interface abstraite pour le repository des Commandes."""

    @abstractmethod
    async def add(self, document: Any) -> OrderRecord:
        """Valide puis ajoute une nouvelle commande avec ses articles."""
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, order_id: int) -> Optional[OrderRecord]:
        """Récupère une commande par son ID, incluant ses articles."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, order_id: int, changes: Mapping[str, Any]) -> OrderRecord:
        """Applique des modifications à une commande; le document complet est revalidé."""
        raise NotImplementedError

    @abstractmethod
    async def list_by_user(
        self,
        user_id: str,
        status: Optional[OrderStatus] = None,
        newest_first: bool = False,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[OrderRecord]:
        """Liste les commandes d'un utilisateur, éventuellement filtrées par statut."""
        raise NotImplementedError

    @abstractmethod
    async def list_by_product(self, product_id: str) -> List[OrderRecord]:
        """Liste les commandes contenant au moins un article du produit donné."""
        raise NotImplementedError

    @abstractmethod
    async def count(self) -> int:
        raise NotImplementedError

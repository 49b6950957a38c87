import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from order_store.orders.domain.entities import OrderRecord
from order_store.orders.domain.repositories import AbstractOrderRepository

logger = logging.getLogger(__name__)


def _utc(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


# Données de test insérées au premier démarrage
SAMPLE_ORDERS: List[Dict[str, Any]] = [
    {
        "userId": "507f1f77bcf86cd799439011",
        "items": [
            {
                "productId": "507f1f77bcf86cd799439021",
                "productName": "Laptop Dell XPS 13",
                "quantity": 1,
                "unitPrice": 1299.99,
                "description": "Ordinateur portable haute performance",
                "category": "Informatique",
            }
        ],
        "status": "DELIVERED",
        "totalAmount": 1299.99,
        "taxAmount": 259.99,
        "shippingAmount": 0.0,
        "shippingAddress": {
            "street": "123 Rue de la Paix",
            "city": "Paris",
            "postalCode": "75001",
            "country": "France",
        },
        "notes": "Livraison rapide demandée",
        "createdAt": _utc("2024-01-15T10:30:00"),
        "updatedAt": _utc("2024-01-18T14:20:00"),
    },
    {
        "userId": "507f1f77bcf86cd799439012",
        "items": [
            {
                "productId": "507f1f77bcf86cd799439022",
                "productName": "iPhone 15 Pro",
                "quantity": 1,
                "unitPrice": 1199.99,
                "description": "Smartphone dernière génération",
                "category": "Téléphonie",
            },
            {
                "productId": "507f1f77bcf86cd799439023",
                "productName": "Coque iPhone 15 Pro",
                "quantity": 1,
                "unitPrice": 29.99,
                "description": "Protection en silicone",
                "category": "Accessoires",
            },
        ],
        "status": "PROCESSING",
        "totalAmount": 1229.98,
        "taxAmount": 245.99,
        "shippingAmount": 9.99,
        "shippingAddress": {
            "street": "456 Avenue des Champs",
            "city": "Lyon",
            "postalCode": "69001",
            "country": "France",
        },
        "notes": "Commande groupée",
        "createdAt": _utc("2024-01-20T09:15:00"),
        "updatedAt": _utc("2024-01-20T16:45:00"),
    },
    {
        "userId": "507f1f77bcf86cd799439013",
        "items": [
            {
                "productId": "507f1f77bcf86cd799439024",
                "productName": "Casque Sony WH-1000XM5",
                "quantity": 2,
                "unitPrice": 399.99,
                "description": "Casque à réduction de bruit",
                "category": "Audio",
            }
        ],
        "status": "PENDING",
        "totalAmount": 799.98,
        "taxAmount": 159.99,
        "shippingAmount": 5.99,
        "shippingAddress": {
            "street": "789 Boulevard Saint-Germain",
            "city": "Marseille",
            "postalCode": "13001",
            "country": "France",
        },
        "notes": "Cadeau - emballage spécial",
        "createdAt": _utc("2024-01-22T14:30:00"),
        "updatedAt": _utc("2024-01-22T14:30:00"),
    },
]


async def seed_sample_orders(repository: AbstractOrderRepository) -> List[OrderRecord]:
    """
    Insère les commandes d'exemple si la collection est vide.
    Un redémarrage du conteneur ne duplique donc pas les données.
    """
    existing = await repository.count()
    if existing:
        logger.info(f"{existing} commande(s) déjà présente(s): données de test non insérées.")
        return []

    records = [await repository.add(document) for document in SAMPLE_ORDERS]
    logger.info(f"Données de test insérées ({len(records)} commandes).")
    return records

"""Exceptions spécifiques au stockage des commandes."""


class OrderStoreException(Exception):
    """Classe de base pour les exceptions du stockage des commandes."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class OrderSchemaViolation(OrderStoreException):
    """Levée lorsqu'un document de commande ne respecte pas le schéma (écriture rejetée)."""
    def __init__(self, field: str, reason: str):
        super().__init__(f"Document de commande invalide: champ '{field}' - {reason}")
        self.field = field
        self.reason = reason


class OrderIndexError(OrderStoreException):
    """Levée lorsqu'un index secondaire ne peut pas être créé ou vérifié."""
    def __init__(self, index_name: str, reason: str):
        super().__init__(f"Index '{index_name}' non disponible: {reason}")
        self.index_name = index_name
        self.reason = reason


class OrderProvisioningError(OrderStoreException):
    """Levée lorsque la création de l'utilisateur applicatif ou de ses droits échoue."""
    def __init__(self, role: str, reason: str):
        super().__init__(f"Provisionnement de l'utilisateur '{role}' impossible: {reason}")
        self.role = role
        self.reason = reason


class OrderNotFoundException(OrderStoreException):
    """Levée lorsqu'une commande spécifique n'est pas trouvée."""
    def __init__(self, order_id: int):
        super().__init__(f"Commande avec ID {order_id} non trouvée.")
        self.order_id = order_id

"""Domain errors for the inventory service."""


class InventoryError(Exception):
    """Base class for inventory domain errors."""


class InvalidEntity(InventoryError):
    """Raised when a site, reagent or lot fails validation."""


class InvalidMovement(InventoryError):
    """Raised when a shipment, transfer or inventory count breaks a rule."""


class NotFound(InventoryError):
    """Raised when a referenced record does not exist."""


class DuplicateEntity(InventoryError):
    """Raised when a unique name or lot number is already taken."""


class InUse(InventoryError):
    """Raised when deleting a record that other records still reference."""

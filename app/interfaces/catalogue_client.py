"""Interface contract for catalogue clients."""

from abc import ABC, abstractmethod

from app.schemas.catalogue import CatalogueType, Item, OperationResult


class CatalogueClient(ABC):
    """Async access to one catalogue backend.

    Every method raises ``CatalogueError`` (or a subclass) when the call fails,
    including when the backend answers with a non-success status.
    """

    catalogue_type: CatalogueType

    @abstractmethod
    async def create_item(self, item: Item, token: str) -> OperationResult:
        """Create an item; the LOCAL catalogue assigns its id."""
        raise NotImplementedError

    @abstractmethod
    async def update_item(self, item: Item, token: str) -> OperationResult:
        """Update an existing item identified by ``item['id']``."""
        raise NotImplementedError

    @abstractmethod
    async def delete_item(self, item: Item, token: str) -> OperationResult:
        """Delete the item identified by ``item['id']``."""
        raise NotImplementedError

    @abstractmethod
    async def get_item(self, item_id: str) -> OperationResult:
        """Return the item wrapped as the first element of ``results``."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release network resources held by the client."""
        return None

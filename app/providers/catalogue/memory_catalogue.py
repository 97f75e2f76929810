"""In-memory catalogue client implementation."""

from __future__ import annotations

import copy
import uuid
from collections import defaultdict
from typing import Any

from app.interfaces.catalogue_client import CatalogueClient
from app.schemas.catalogue import CatalogueType, Item, OperationResult
from app.services.errors import CatalogueConflict, CatalogueError, CatalogueNotFound


class InMemoryCatalogueClient(CatalogueClient):
    """Catalogue held in a dict, with failure injection for local testing."""

    def __init__(self, catalogue_type: CatalogueType, *, assign_ids: bool | None = None) -> None:
        self.catalogue_type = catalogue_type
        # Only the LOCAL catalogue issues ids; CENTRAL reuses them.
        self.assign_ids = catalogue_type is CatalogueType.LOCAL if assign_ids is None else assign_ids
        self._items: dict[str, Item] = {}
        self._failures: dict[str, list[CatalogueError]] = defaultdict(list)

    def fail_next(self, operation: str, status_code: int = 500, *, times: int = 1, body: Any = None) -> None:
        """Make the next ``times`` calls of ``operation`` fail with ``status_code``."""
        for _ in range(times):
            self._failures[operation].append(
                CatalogueError(
                    f"Injected {operation} failure",
                    catalogue_type=self.catalogue_type,
                    status_code=status_code,
                    body=body,
                )
            )

    def seed(self, item: Item) -> None:
        """Store an item directly, bypassing validation."""
        self._items[str(item["id"])] = copy.deepcopy(item)

    def snapshot(self, item_id: str) -> Item | None:
        """Helper for tests/debugging; not part of CatalogueClient contract."""
        item = self._items.get(item_id)
        return copy.deepcopy(item) if item is not None else None

    async def create_item(self, item: Item, token: str) -> OperationResult:
        self._before_call("create_item", item)
        stored = copy.deepcopy(item)
        item_id = stored.get("id")
        if item_id is None:
            if not self.assign_ids:
                raise CatalogueError(
                    "Item id is required",
                    catalogue_type=self.catalogue_type,
                    status_code=400,
                    body=self._envelope("InvalidSchema", "Item id is required"),
                )
            item_id = str(uuid.uuid4())
            stored["id"] = item_id
        item_id = str(item_id)

        if item_id in self._items or self._name_taken(stored.get("name")):
            raise CatalogueConflict(
                f"Item '{item_id}' already exists",
                catalogue_type=self.catalogue_type,
                body=self._envelope("NotUnique", "Item already exists"),
            )

        stored["itemStatus"] = "ACTIVE"
        self._items[item_id] = stored
        return OperationResult(status_code=201, results=copy.deepcopy(stored))

    async def update_item(self, item: Item, token: str) -> OperationResult:
        self._before_call("update_item", item)
        item_id = self._require_existing(item.get("id"))
        stored = copy.deepcopy(item)
        stored["id"] = item_id
        stored.setdefault("itemStatus", self._items[item_id].get("itemStatus", "ACTIVE"))
        self._items[item_id] = stored
        return OperationResult(status_code=200, results=copy.deepcopy(stored))

    async def delete_item(self, item: Item, token: str) -> OperationResult:
        self._before_call("delete_item", item)
        item_id = self._require_existing(item.get("id"))
        del self._items[item_id]
        return OperationResult(status_code=200, results={"id": item_id})

    async def get_item(self, item_id: str) -> OperationResult:
        self._before_call("get_item", item_id)
        item_id = self._require_existing(item_id)
        return OperationResult(status_code=200, results=[copy.deepcopy(self._items[item_id])])

    def _before_call(self, operation: str, payload: Any) -> None:
        """Raise the next injected failure for ``operation``, if any."""
        pending = self._failures.get(operation)
        if pending:
            raise pending.pop(0)

    def _require_existing(self, item_id: Any) -> str:
        if item_id is None or str(item_id) not in self._items:
            raise CatalogueNotFound(
                f"Item '{item_id}' not found",
                catalogue_type=self.catalogue_type,
                body=self._envelope("ItemNotFound", "Item not found"),
            )
        return str(item_id)

    def _name_taken(self, name: Any) -> bool:
        if name is None:
            return False
        return any(existing.get("name") == name for existing in self._items.values())

    def _envelope(self, error_type: str, title: str) -> dict[str, str]:
        return {"type": f"urn:dx:cat:{error_type}", "title": title, "detail": self.catalogue_type.value}

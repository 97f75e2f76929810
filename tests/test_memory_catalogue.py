"""Unit tests for the in-memory catalogue used in local runs."""

from __future__ import annotations

import unittest

from app.providers.catalogue.memory_catalogue import InMemoryCatalogueClient
from app.schemas.catalogue import CatalogueType, strip_backend_fields
from app.services.errors import CatalogueConflict, CatalogueError, CatalogueNotFound


class InMemoryCatalogueClientTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_local_catalogue_assigns_ids(self) -> None:
        catalogue = InMemoryCatalogueClient(CatalogueType.LOCAL)

        result = await catalogue.create_item({"name": "Sensor-1"}, "token")

        self.assertEqual(result.status_code, 201)
        self.assertTrue(result.results["id"])
        self.assertEqual(result.results["itemStatus"], "ACTIVE")

    async def test_central_catalogue_requires_an_id(self) -> None:
        catalogue = InMemoryCatalogueClient(CatalogueType.CENTRAL)

        with self.assertRaises(CatalogueError) as ctx:
            await catalogue.create_item({"name": "Sensor-1"}, "token")

        self.assertEqual(ctx.exception.status_code, 400)

    async def test_duplicate_name_is_not_unique(self) -> None:
        catalogue = InMemoryCatalogueClient(CatalogueType.LOCAL)
        await catalogue.create_item({"name": "Sensor-1"}, "token")

        with self.assertRaises(CatalogueConflict):
            await catalogue.create_item({"name": "Sensor-1"}, "token")

    async def test_missing_items_are_not_found(self) -> None:
        catalogue = InMemoryCatalogueClient(CatalogueType.LOCAL)

        with self.assertRaises(CatalogueNotFound):
            await catalogue.update_item({"id": "missing-1"}, "token")
        with self.assertRaises(CatalogueNotFound):
            await catalogue.delete_item({"id": "missing-1"}, "token")

    async def test_get_wraps_item_in_sequence(self) -> None:
        catalogue = InMemoryCatalogueClient(CatalogueType.CENTRAL)
        catalogue.seed({"id": "abc-1", "name": "Sensor-1"})

        result = await catalogue.get_item("abc-1")

        self.assertEqual(result.results, [{"id": "abc-1", "name": "Sensor-1"}])
        self.assertEqual(result.first_item(), {"id": "abc-1", "name": "Sensor-1"})

    async def test_injected_failures_are_consumed_in_order(self) -> None:
        catalogue = InMemoryCatalogueClient(CatalogueType.CENTRAL)
        catalogue.seed({"id": "abc-1"})
        catalogue.fail_next("get_item", status_code=503)

        with self.assertRaises(CatalogueError) as ctx:
            await catalogue.get_item("abc-1")
        result = await catalogue.get_item("abc-1")

        self.assertTrue(ctx.exception.transient)
        self.assertEqual(result.status_code, 200)

    def test_strip_backend_fields(self) -> None:
        item = {"id": "abc-1", "itemStatus": "ACTIVE", "resourceServerHTTPAccessURL": "https://rs", "name": "x"}

        self.assertEqual(strip_backend_fields(item), {"id": "abc-1", "name": "x"})


if __name__ == "__main__":
    unittest.main()

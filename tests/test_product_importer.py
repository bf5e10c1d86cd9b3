"""Tests for the product import and removal handlers."""

import json
from unittest.mock import MagicMock

from conftest import listing_json, product_json
from src.catalog_models import Listing, Product
from src.product_importer import ProductImporter, ProductRemover


def _make_db():
    db = MagicMock()
    cur = MagicMock()
    db.cursor.return_value.__enter__.return_value = cur
    return db, cur


class TestProductImporter:
    def test_upserts_with_listing_variants(self):
        db, cur = _make_db()
        cur.fetchone.return_value = {"id": 501}
        client = MagicMock()
        importer = ProductImporter(db, client, table="catalog_products")
        listing = Listing.from_json(listing_json(12, variants=[{"variant_id": 3}]))

        result = importer.import_product(Product.from_json(product_json(12)), listing, "1")

        assert result == 501
        client.get_variants.assert_not_called()
        params = cur.execute.call_args.args[1]
        assert params[0] == 12
        assert params[1] == "1"
        assert json.loads(params[-1]) == [{"variant_id": 3}]

    def test_fetches_variants_when_listing_has_none(self):
        db, cur = _make_db()
        cur.fetchone.return_value = {"id": 9}
        client = MagicMock()
        client.get_variants.return_value = [{"id": 44}]
        importer = ProductImporter(db, client)

        result = importer.import_product(Product.from_json(product_json(12)), Listing.from_json(listing_json(12)), "1")

        assert result == 9
        client.get_variants.assert_called_once_with(12)
        assert json.loads(cur.execute.call_args.args[1][-1]) == [{"id": 44}]

    def test_api_failure_returns_none(self):
        db, cur = _make_db()
        client = MagicMock()
        client.get_variants.return_value = None
        importer = ProductImporter(db, client)

        result = importer.import_product(Product.from_json(product_json(12)), Listing.from_json(listing_json(12)), "1")

        assert result is None
        cur.execute.assert_not_called()

    def test_listing_for_other_channel_returns_none(self, caplog):
        db, cur = _make_db()
        importer = ProductImporter(db, MagicMock())
        listing = Listing.from_json(listing_json(12, channel_id=2))

        assert importer.import_product(Product.from_json(product_json(12)), listing, "1") is None
        cur.execute.assert_not_called()
        assert "retrying until CHANNEL_ID matches" in caplog.text


class TestProductRemover:
    def test_remove(self):
        db, cur = _make_db()
        cur.fetchone.return_value = {"id": 1}

        ProductRemover(db).remove("12")

        assert cur.execute.call_args.args[1] == ("12",)

    def test_missing_product_is_not_an_error(self):
        db, cur = _make_db()
        cur.fetchone.return_value = None

        ProductRemover(db).remove("12")

        cur.execute.assert_called_once()

"""Import and removal handlers for queued catalog products."""
import json
from typing import Optional

from psycopg2 import sql

from src import settings
from src.bigcommerce_client import BigCommerceClient
from src.catalog_models import Listing, Product
from src.db import Database
from src.logging_conf import logger


class ProductImporter:
    """Writes a product and its channel listing into the local catalog table."""

    def __init__(self, db: Database, client: BigCommerceClient, table: str = None):
        self.db = db
        self.client = client
        self.table = sql.Identifier(table or settings.CATALOG_TABLE)

    def import_product(self, product: Product, listing: Listing, channel_id: str) -> Optional[int]:
        """
        Upsert a product for the given channel.

        Args:
            product: Deserialized catalog product
            listing: The product's listing on the channel
            channel_id: Sales channel the import is scoped to

        Returns:
            Local catalog row ID, or None if the import failed and may be retried.
            A listing for another channel also returns None: CHANNEL_ID is read
            on every run, so the item imports once the configured channel is
            corrected, and runs out of attempts otherwise.
        """
        if listing.channel_id is not None and str(listing.channel_id) != str(channel_id):
            logger.warning(
                f"Listing {listing.listing_id} belongs to channel {listing.channel_id}, not {channel_id}; "
                f"retrying until CHANNEL_ID matches or attempts run out",
                extra={"product_id": product.id}
            )
            return None

        variants = listing.variants
        if not variants:
            variants = self.client.get_variants(product.id)
            if variants is None:
                return None

        query = sql.SQL("""
            INSERT INTO {table} (
                bc_id, channel_id, listing_id, name, sku, price,
                listing_state, product_data, listing_data, variants, updated_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, NOW())
            ON CONFLICT (bc_id) DO UPDATE SET
                channel_id = EXCLUDED.channel_id,
                listing_id = EXCLUDED.listing_id,
                name = EXCLUDED.name,
                sku = EXCLUDED.sku,
                price = EXCLUDED.price,
                listing_state = EXCLUDED.listing_state,
                product_data = EXCLUDED.product_data,
                listing_data = EXCLUDED.listing_data,
                variants = EXCLUDED.variants,
                updated_at = NOW()
            RETURNING id
        """).format(table=self.table)
        with self.db.cursor() as cur:
            cur.execute(query, (
                product.id,
                str(channel_id),
                listing.listing_id,
                listing.name or product.name,
                product.sku,
                product.price,
                listing.state,
                json.dumps(product.data),
                json.dumps(listing.data),
                json.dumps(variants),
            ))
            row = cur.fetchone()

        if not row:
            return None
        logger.info(f"Imported product {product.id} ({product.name})", extra={"product_id": product.id})
        return row["id"]


class ProductRemover:
    """Removes a product from the local catalog table."""

    def __init__(self, db: Database, table: str = None):
        self.db = db
        self.table = sql.Identifier(table or settings.CATALOG_TABLE)

    def remove(self, product_id: str) -> None:
        """Delete the product's row; a product that is already gone is not an error."""
        query = sql.SQL("DELETE FROM {table} WHERE bc_id = %s RETURNING id").format(table=self.table)
        with self.db.cursor() as cur:
            cur.execute(query, (product_id,))
            removed = cur.fetchone() is not None
        if removed:
            logger.info(f"Removed product {product_id}", extra={"product_id": product_id})
        else:
            logger.debug(f"Product {product_id} was not in the catalog", extra={"product_id": product_id})

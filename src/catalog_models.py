"""Catalog payloads carried by queued import items."""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class PayloadError(ValueError):
    """A queued product or listing payload could not be deserialized."""


def _load_object(raw: Optional[str], kind: str) -> Dict[str, Any]:
    if not raw:
        raise PayloadError(f"{kind} payload is empty")
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise PayloadError(f"{kind} payload is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise PayloadError(f"{kind} payload is not a JSON object")
    return data


@dataclass
class Product:
    """A catalog product as exported by the BigCommerce catalog API."""

    id: int
    name: str
    sku: str = ""
    price: Optional[float] = None
    is_visible: bool = True
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "Product":
        data = _load_object(raw, "Product")
        try:
            product_id = int(data["id"])
        except (KeyError, TypeError, ValueError) as e:
            raise PayloadError(f"Product payload has no usable id: {e}") from e
        price = data.get("price")
        return cls(
            id=product_id,
            name=str(data.get("name") or ""),
            sku=str(data.get("sku") or ""),
            price=float(price) if isinstance(price, (int, float)) else None,
            is_visible=bool(data.get("is_visible", True)),
            data=data,
        )


@dataclass
class Listing:
    """A product's listing on one sales channel."""

    listing_id: int
    product_id: int
    channel_id: Optional[int] = None
    state: str = "active"
    name: str = ""
    variants: List[Dict[str, Any]] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "Listing":
        data = _load_object(raw, "Listing")
        try:
            listing_id = int(data["listing_id"])
            product_id = int(data["product_id"])
            channel_id = data.get("channel_id")
            channel_id = int(channel_id) if channel_id not in (None, "") else None
        except (KeyError, TypeError, ValueError) as e:
            raise PayloadError(f"Listing payload is missing identifiers: {e}") from e
        return cls(
            listing_id=listing_id,
            product_id=product_id,
            channel_id=channel_id,
            state=str(data.get("state") or "active"),
            name=str(data.get("name") or ""),
            variants=list(data.get("variants") or []),
            data=data,
        )

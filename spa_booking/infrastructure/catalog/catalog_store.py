from __future__ import annotations

import json
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, TypeVar

from spa_booking.application.exceptions import PersistenceError
from spa_booking.application.ports.catalog import CatalogPort
from spa_booking.domain.entities.catalog import (
    AreaOptionGroup,
    PricedOption,
    RoomType,
    RoomUnit,
    ServiceArea,
    ServiceDefinition,
)
from spa_booking.domain.entities.coupon import Coupon

logger = logging.getLogger(__name__)

T = TypeVar("T")


def load_document(path: str | Path) -> dict[str, Any]:
    """Read a JSON seed document. A missing file yields an empty document."""
    file_path = Path(path)
    if not file_path.exists():
        logger.warning("Seed document not found", extra={"reason": str(file_path)})
        return {}
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        raise PersistenceError(f"Cannot read {file_path}: {e}") from e


def _amount(value: Any) -> int:
    """Whole units from an int, float or numeric string, rounded half up. Malformed values raise ValueError."""
    if value is None or value == "":
        return 0
    try:
        return int(Decimal(str(value).strip()).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Invalid amount: {value!r}") from e


def _option(data: dict[str, Any]) -> PricedOption:
    return PricedOption(
        name=str(data.get("name", "")),
        price=_amount(data.get("price")),
        duration=_amount(data.get("duration")),
    )


def parse_service(service_id: str, data: dict[str, Any]) -> ServiceDefinition:
    return ServiceDefinition(
        service_id=service_id,
        name=str(data.get("serviceName") or data.get("name") or ""),
        price=_amount(data.get("price")),
        duration=_amount(data.get("duration")),
        service_type=data.get("serviceType") or "single",
        areas=tuple(
            ServiceArea(
                name=str(area.get("name", "")),
                price=_amount(area.get("price")),
                duration=_amount(area.get("duration")),
                packages=tuple(_option(p) for p in area.get("packages") or []),
            )
            for area in data.get("areas") or []
        ),
        area_options=tuple(
            AreaOptionGroup(
                area_name=str(group.get("areaName", "")),
                options=tuple(_option(o) for o in group.get("options") or []),
            )
            for group in data.get("areaOptions") or []
        ),
        add_ons=tuple(_option(a) for a in data.get("addOnServices") or []),
        image_url=data.get("imageUrl") or "",
        status=data.get("status") or "available",
    )


def parse_room_type(room_type_id: str, data: dict[str, Any]) -> RoomType:
    return RoomType(
        room_type_id=room_type_id,
        name=str(data.get("name", "")),
        base_price=_amount(data.get("basePrice")),
        units=tuple(
            RoomUnit(
                room_id=str(room.get("id", "")),
                room_number=str(room.get("roomNumber", "")),
                status=room.get("status") or "",
            )
            for room in data.get("rooms") or []
        ),
        image_url=data.get("imageUrl"),
    )


def parse_coupons(data: dict[str, Any]) -> dict[str, list[Coupon]]:
    """Coupons keyed by owning user id."""
    result: dict[str, list[Coupon]] = {}
    for user_id, items in (data.get("coupons") or {}).items():
        result[user_id] = [
            Coupon(
                coupon_id=str(item.get("id", "")),
                name=str(item.get("name", "")),
                discount_type=str(item.get("discountType", "")),
                discount_value=float(item.get("discountValue") or 0),
                used=bool(item.get("used", False)),
            )
            for item in items
        ]
    return result


def _parse_entries(docs: dict[str, Any] | None, parse: Callable[[str, dict[str, Any]], T]) -> dict[str, T]:
    # Malformed entries are skipped and logged; lookups for them raise NotFound upstream.
    entries: dict[str, T] = {}
    for entry_id, doc in (docs or {}).items():
        try:
            entries[entry_id] = parse(entry_id, doc)
        except ValueError as e:
            logger.error("Catalog entry skipped", extra={"reason": entry_id, "error": str(e)})
    return entries


class MemoryCatalogStore(CatalogPort):
    def __init__(
        self,
        services: dict[str, ServiceDefinition] | None = None,
        room_types: dict[str, RoomType] | None = None,
    ) -> None:
        self._services = dict(services or {})
        self._room_types = dict(room_types or {})

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "MemoryCatalogStore":
        services = _parse_entries(data.get("services"), parse_service)
        room_types = _parse_entries(data.get("roomTypes"), parse_room_type)
        logger.info(
            "Catalog loaded",
            extra={"reason": f"{len(services)} services, {len(room_types)} room types"},
        )
        return cls(services, room_types)

    def get_service(self, service_id: str) -> ServiceDefinition | None:
        return self._services.get(service_id)

    def get_room_type(self, room_type_id: str) -> RoomType | None:
        return self._room_types.get(room_type_id)

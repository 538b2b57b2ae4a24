from __future__ import annotations

from dataclasses import dataclass

from spa_booking.domain.entities.booking import AreaOptionChoice
from spa_booking.domain.entities.catalog import PricedOption, RoomType, ServiceArea, ServiceDefinition


@dataclass(frozen=True)
class ServiceQuote:
    price: int
    duration: int
    subtotal: int
    base_price: int
    add_ons_total: int
    selected_area: ServiceArea | None = None
    selected_package: PricedOption | None = None
    selected_area_options: tuple[AreaOptionChoice, ...] = ()
    add_ons: tuple[PricedOption, ...] = ()


@dataclass(frozen=True)
class RoomQuote:
    base_price: int
    nights: int
    rooms: int
    subtotal: int
    discount: int = 0  # pre-computed discount carried from an upstream screen


@dataclass(frozen=True)
class Charge:
    original_price: int
    discount: int
    total_price: int


def _pick(items: tuple, index: int | None):
    if index is None or index < 0 or index >= len(items):
        return None
    return items[index]


def apply_discount(subtotal: int, discount: int) -> Charge:
    """Clamp discount into [0, subtotal] and derive the authoritative total."""
    clamped = max(0, min(discount, subtotal))
    return Charge(original_price=subtotal, discount=clamped, total_price=max(0, subtotal - clamped))


class PricingResolver:
    def resolve_service(
        self,
        service: ServiceDefinition,
        area_index: int | None = None,
        package_index: int | None = None,
        area_options: list[AreaOptionChoice] | None = None,
        add_on_names: list[str] | None = None,
    ) -> ServiceQuote:
        price = service.price
        duration = service.duration
        selected_area: ServiceArea | None = None
        selected_package: PricedOption | None = None
        matched_choices: list[AreaOptionChoice] = []

        # Bad indices fall back to the base price silently.
        if service.service_type == "multi-area" and service.areas:
            selected_area = _pick(service.areas, area_index)
            if selected_area is not None:
                price = selected_area.price
                duration = selected_area.duration
                selected_package = _pick(selected_area.packages, package_index)
                if selected_package is not None:
                    price = selected_package.price
                    duration = selected_package.duration

        if service.service_type == "area-based-options":
            price = 0
            duration = 0
            for choice in area_options or []:
                group = service.find_area_group(choice.area_name)
                option = group.find_option(choice.option_name) if group else None
                if option is None:
                    continue
                price += option.price
                duration += option.duration
                matched_choices.append(choice)

        add_ons = self._resolve_add_ons(service, add_on_names or [])
        add_ons_total = sum(a.price for a in add_ons)
        add_ons_duration = sum(a.duration for a in add_ons)

        final_price = price + add_ons_total
        return ServiceQuote(
            price=final_price,
            duration=duration + add_ons_duration,
            subtotal=final_price,
            base_price=price,
            add_ons_total=add_ons_total,
            selected_area=selected_area,
            selected_package=selected_package,
            selected_area_options=tuple(matched_choices),
            add_ons=add_ons,
        )

    def resolve_room(
        self,
        room_type: RoomType,
        nights: int,
        rooms: int,
        original_price: int = 0,
        discount: int = 0,
        total_price: int = 0,
    ) -> RoomQuote:
        rooms = max(1, rooms)
        computed = room_type.base_price * nights * rooms

        if original_price > 0 or discount > 0 or total_price > 0:
            if original_price > 0:
                subtotal = original_price
            elif total_price > 0:
                subtotal = total_price + max(0, discount)
            else:
                subtotal = computed
            return RoomQuote(
                base_price=room_type.base_price,
                nights=nights,
                rooms=rooms,
                subtotal=subtotal,
                discount=max(0, discount),
            )

        return RoomQuote(base_price=room_type.base_price, nights=nights, rooms=rooms, subtotal=computed)

    def _resolve_add_ons(self, service: ServiceDefinition, names: list[str]) -> tuple[PricedOption, ...]:
        by_name = {a.name: a for a in service.add_ons}
        resolved: list[PricedOption] = []
        seen: set[str] = set()
        for name in names:
            if name in by_name and name not in seen:
                resolved.append(by_name[name])
                seen.add(name)
        return tuple(resolved)

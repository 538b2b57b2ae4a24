from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PricedOption:
    name: str
    price: int = 0
    duration: int = 0


@dataclass(frozen=True)
class ServiceArea:
    name: str
    price: int = 0
    duration: int = 0
    packages: tuple[PricedOption, ...] = ()


@dataclass(frozen=True)
class AreaOptionGroup:
    area_name: str
    options: tuple[PricedOption, ...] = ()

    def find_option(self, option_name: str) -> PricedOption | None:
        for option in self.options:
            if option.name == option_name:
                return option
        return None


@dataclass(frozen=True)
class ServiceDefinition:
    service_id: str
    name: str
    price: int = 0
    duration: int = 0
    service_type: str = "single"  # "single", "multi-area", "area-based-options", "option-based"
    areas: tuple[ServiceArea, ...] = ()
    area_options: tuple[AreaOptionGroup, ...] = ()
    add_ons: tuple[PricedOption, ...] = ()
    image_url: str = ""
    status: str = "available"

    def find_area_group(self, area_name: str) -> AreaOptionGroup | None:
        for group in self.area_options:
            if group.area_name == area_name:
                return group
        return None


@dataclass(frozen=True)
class RoomUnit:
    room_id: str
    room_number: str
    status: str = ""  # "" or "available" means bookable

    @property
    def is_usable(self) -> bool:
        return self.status in ("", "available")


@dataclass(frozen=True)
class RoomType:
    room_type_id: str
    name: str
    base_price: int = 0
    units: tuple[RoomUnit, ...] = ()
    image_url: str | None = None

    def usable_units(self) -> list[RoomUnit]:
        return [unit for unit in self.units if unit.is_usable]

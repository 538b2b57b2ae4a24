from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from spa_booking.domain.entities.booking import AreaOptionChoice, CustomerInfo


class CustomerInfoDTO(BaseModel):
    name: str = ""
    phone: str = ""
    note: str = ""
    picture_url: str = ""

    def to_entity(self) -> CustomerInfo:
        return CustomerInfo(
            name=self.name.strip(),
            phone=self.phone.strip(),
            note=self.note.strip(),
            picture_url=self.picture_url,
        )


class AreaOptionChoiceDTO(BaseModel):
    area_name: str
    option_name: str

    def to_entity(self) -> AreaOptionChoice:
        return AreaOptionChoice(area_name=self.area_name, option_name=self.option_name)


class ServiceBookingRequest(BaseModel):
    """
    Raw booking intent for a service appointment.
    Prices are never read from here: the client only selects tiers and add-ons.
    """

    service_id: str = ""
    date: str = ""
    time: str = ""
    technician_id: str | None = None
    user_id: str | None = None
    customer_info: CustomerInfoDTO = Field(default_factory=CustomerInfoDTO)
    area_index: int | None = None
    package_index: int | None = None
    selected_area_options: list[AreaOptionChoiceDTO] = Field(default_factory=list)
    add_on_names: list[str] = Field(default_factory=list)
    coupon_id: str | None = None
    status: str | None = None
    payment_method: str | None = None
    payment_due_at: datetime | None = None


class RoomBookingRequest(BaseModel):
    room_type_id: str = ""
    check_in_date: str = ""
    check_out_date: str = ""
    nights: int | None = None
    rooms: int | None = None
    guests: int = 1
    user_id: str | None = None
    customer_info: CustomerInfoDTO = Field(default_factory=CustomerInfoDTO)
    coupon_id: str | None = None
    status: str | None = None
    payment_status: str | None = None
    payment_method: str | None = None
    payment_due_at: datetime | None = None
    # Pre-computed totals from an upstream screen; used only when greater than zero.
    original_price: int = 0
    discount: int = 0
    total_price: int = 0


class BlockSlotRequest(BaseModel):
    date: str
    time: str
    technician_id: str | None = None
    duration: int = 60
    note: str = "Blocked"


class MarkPaidRequest(BaseModel):
    amount: int | None = None
    method: str = "cash"

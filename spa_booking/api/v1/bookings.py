from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException

from spa_booking.api.v1.schemas import (
    ActionResponseSchema,
    CancelRequestSchema,
    CompleteRequestSchema,
    ForceStatusRequestSchema,
    PaymentSlipRequestSchema,
)
from spa_booking.application.dto.action_result import ActionResult
from spa_booking.application.dto.booking_requests import (
    BlockSlotRequest,
    MarkPaidRequest,
    RoomBookingRequest,
    ServiceBookingRequest,
)
from spa_booking.application.exceptions import ErrorCode
from spa_booking.application.use_cases.create_booking import CreateBookingUseCase
from spa_booking.application.use_cases.status_transitions import StatusTransitionUseCase
from spa_booking.domain.entities.principal import AuthContext
from spa_booking.infrastructure.store.documents import booking_to_document
from spa_booking.wiring.dependencies import get_create_booking_use_case, get_status_transition_use_case

router = APIRouter()

_STATUS_BY_ERROR = {
    ErrorCode.validation: 400,
    ErrorCode.unauthorized: 401,
    ErrorCode.not_found: 404,
    ErrorCode.slot_full: 409,
    ErrorCode.room_fully_booked: 409,
    ErrorCode.invalid_coupon: 409,
    ErrorCode.coupon_already_used: 409,
    ErrorCode.invalid_coupon_type: 409,
    ErrorCode.invalid_transition: 409,
    ErrorCode.persistence: 502,
}


def get_auth_context(
    authorization: str | None = Header(default=None),
    x_line_access_token: str | None = Header(default=None),
) -> AuthContext:
    admin_token = None
    if authorization and authorization.lower().startswith("bearer "):
        admin_token = authorization[7:].strip() or None
    return AuthContext(admin_token=admin_token, line_access_token=x_line_access_token)


def _serialize(value: Any) -> Any:
    if hasattr(value, "booking_type"):
        return booking_to_document(value)
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


def to_response(result: ActionResult) -> ActionResponseSchema:
    if not result.success:
        error = result.error or ErrorCode.validation
        raise HTTPException(
            status_code=_STATUS_BY_ERROR.get(error, 400),
            detail={"error": error.value, "message": result.message},
        )
    return ActionResponseSchema(
        booking_id=result.booking_id,
        booking=booking_to_document(result.booking) if result.booking else None,
        data={k: _serialize(v) for k, v in result.data.items()},
    )


@router.post("/bookings/service", response_model=ActionResponseSchema, status_code=201)
def create_service_booking(
    req: ServiceBookingRequest,
    auth: AuthContext = Depends(get_auth_context),
    uc: CreateBookingUseCase = Depends(get_create_booking_use_case),
):
    return to_response(uc.create_service_booking(req, auth))


@router.post("/bookings/room", response_model=ActionResponseSchema, status_code=201)
def create_room_booking(
    req: RoomBookingRequest,
    auth: AuthContext = Depends(get_auth_context),
    uc: CreateBookingUseCase = Depends(get_create_booking_use_case),
):
    return to_response(uc.create_room_booking(req, auth))


@router.post("/bookings/block", response_model=ActionResponseSchema, status_code=201)
def block_slot(
    req: BlockSlotRequest,
    auth: AuthContext = Depends(get_auth_context),
    uc: CreateBookingUseCase = Depends(get_create_booking_use_case),
):
    return to_response(uc.block_slot(req, auth))


@router.get("/bookings", response_model=ActionResponseSchema)
def find_by_phone(
    phone: str,
    auth: AuthContext = Depends(get_auth_context),
    uc: StatusTransitionUseCase = Depends(get_status_transition_use_case),
):
    return to_response(uc.find_by_phone(phone, auth))


@router.get("/bookings/{booking_id}", response_model=ActionResponseSchema)
def get_booking(
    booking_id: str,
    auth: AuthContext = Depends(get_auth_context),
    uc: StatusTransitionUseCase = Depends(get_status_transition_use_case),
):
    return to_response(uc.get(booking_id, auth))


@router.post("/bookings/{booking_id}/confirm", response_model=ActionResponseSchema)
def confirm(
    booking_id: str,
    auth: AuthContext = Depends(get_auth_context),
    uc: StatusTransitionUseCase = Depends(get_status_transition_use_case),
):
    return to_response(uc.confirm(booking_id, auth))


@router.post("/bookings/{booking_id}/start", response_model=ActionResponseSchema)
def start(
    booking_id: str,
    auth: AuthContext = Depends(get_auth_context),
    uc: StatusTransitionUseCase = Depends(get_status_transition_use_case),
):
    return to_response(uc.start(booking_id, auth))


@router.post("/bookings/{booking_id}/complete", response_model=ActionResponseSchema)
def complete(
    booking_id: str,
    req: CompleteRequestSchema | None = None,
    auth: AuthContext = Depends(get_auth_context),
    uc: StatusTransitionUseCase = Depends(get_status_transition_use_case),
):
    return to_response(uc.complete(booking_id, auth, note=req.note if req else None))


@router.post("/bookings/{booking_id}/cancel", response_model=ActionResponseSchema)
def cancel(
    booking_id: str,
    req: CancelRequestSchema | None = None,
    auth: AuthContext = Depends(get_auth_context),
    uc: StatusTransitionUseCase = Depends(get_status_transition_use_case),
):
    return to_response(uc.cancel(booking_id, auth, reason=req.reason if req else None))


@router.post("/bookings/{booking_id}/paid", response_model=ActionResponseSchema)
def mark_paid(
    booking_id: str,
    req: MarkPaidRequest,
    auth: AuthContext = Depends(get_auth_context),
    uc: StatusTransitionUseCase = Depends(get_status_transition_use_case),
):
    return to_response(uc.mark_paid(booking_id, auth, amount=req.amount, method=req.method))


@router.post("/bookings/{booking_id}/invoice", response_model=ActionResponseSchema)
def send_invoice(
    booking_id: str,
    auth: AuthContext = Depends(get_auth_context),
    uc: StatusTransitionUseCase = Depends(get_status_transition_use_case),
):
    return to_response(uc.send_invoice(booking_id, auth))


@router.post("/bookings/{booking_id}/payment-slip", response_model=ActionResponseSchema)
def submit_payment_slip(
    booking_id: str,
    req: PaymentSlipRequestSchema,
    auth: AuthContext = Depends(get_auth_context),
    uc: StatusTransitionUseCase = Depends(get_status_transition_use_case),
):
    return to_response(uc.submit_payment_slip(booking_id, auth, req.slip_reference))


@router.put("/bookings/{booking_id}/status", response_model=ActionResponseSchema)
def force_set_status(
    booking_id: str,
    req: ForceStatusRequestSchema,
    auth: AuthContext = Depends(get_auth_context),
    uc: StatusTransitionUseCase = Depends(get_status_transition_use_case),
):
    return to_response(uc.force_set_status(booking_id, req.status, auth, note=req.note))


@router.delete("/bookings/{booking_id}", response_model=ActionResponseSchema)
def delete_booking(
    booking_id: str,
    auth: AuthContext = Depends(get_auth_context),
    uc: StatusTransitionUseCase = Depends(get_status_transition_use_case),
):
    return to_response(uc.delete(booking_id, auth))

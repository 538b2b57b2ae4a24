import hmac
import logging

from fastapi import APIRouter, Depends, Header, HTTPException

from spa_booking.api.v1.bookings import to_response
from spa_booking.api.v1.schemas import ActionResponseSchema
from spa_booking.application.use_cases.auto_cancel_unpaid import AutoCancelUnpaidUseCase
from spa_booking.core.config import settings
from spa_booking.wiring.dependencies import get_auto_cancel_use_case

router = APIRouter()
logger = logging.getLogger(__name__)


def verify_cron_secret(authorization: str | None = Header(default=None)) -> None:
    """Cron callers send `Authorization: Bearer <CRON_SECRET>`. Unset secret is accepted only in dev/local."""
    if not settings.CRON_SECRET:
        if settings.ENV.lower() in {"dev", "local"}:
            return
        logger.warning("Cron call rejected", extra={"reason": "CRON_SECRET not configured"})
        raise HTTPException(status_code=401, detail={"error": "Unauthorized", "message": "Cron disabled."})
    expected = f"Bearer {settings.CRON_SECRET}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        raise HTTPException(status_code=401, detail={"error": "Unauthorized", "message": "Invalid cron secret."})


@router.api_route("/cron/auto-cancel-unpaid", methods=["GET", "POST"], response_model=ActionResponseSchema)
def auto_cancel_unpaid(
    _: None = Depends(verify_cron_secret),
    uc: AutoCancelUnpaidUseCase = Depends(get_auto_cancel_use_case),
):
    return to_response(uc.execute())

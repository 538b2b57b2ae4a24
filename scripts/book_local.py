#!/usr/bin/env python3
"""
Local booking harness (no HTTP, no LINE).

Usage:
  ENV=dev CATALOG_FILE=data/catalog.example.json SETTINGS_FILE=data/settings.example.json \
    ADMIN_API_TOKENS=local-admin python3 scripts/book_local.py service massage 2024-05-01 10:00 --add-on "Hot Stone"

  python3 scripts/book_local.py room deluxe 2024-05-01 2024-05-03 --rooms 2
  python3 scripts/book_local.py status <booking_id> confirm
  python3 scripts/book_local.py auto-cancel

Runs through the same use cases as the API, as an admin, against the JSON store in DATA_DIR.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from spa_booking.application.dto.action_result import ActionResult
from spa_booking.application.dto.booking_requests import (
    CustomerInfoDTO,
    RoomBookingRequest,
    ServiceBookingRequest,
)
from spa_booking.core.config import settings
from spa_booking.domain.entities.principal import AuthContext
from spa_booking.infrastructure.store.documents import booking_to_document
from spa_booking.wiring.dependencies import (
    get_auto_cancel_use_case,
    get_create_booking_use_case,
    get_status_transition_use_case,
)


def _admin_auth() -> AuthContext:
    tokens = sorted(settings.admin_tokens)
    if not tokens:
        raise SystemExit("Set ADMIN_API_TOKENS to run the local harness as admin.")
    return AuthContext(admin_token=tokens[0])


def _print_result(result: ActionResult) -> None:
    if not result.success:
        print(f"FAILED {result.error.value if result.error else '?'}: {result.message}")
        return
    print(f"OK booking_id={result.booking_id}")
    if result.booking:
        print(json.dumps(booking_to_document(result.booking), indent=2, ensure_ascii=False))
    if result.data:
        print(json.dumps(result.data, indent=2, ensure_ascii=False, default=str))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run booking operations locally")
    sub = parser.add_subparsers(dest="command", required=True)

    service = sub.add_parser("service")
    service.add_argument("service_id")
    service.add_argument("date")
    service.add_argument("time")
    service.add_argument("--add-on", action="append", default=[])
    service.add_argument("--area", type=int)
    service.add_argument("--package", type=int)
    service.add_argument("--user-id")
    service.add_argument("--coupon")
    service.add_argument("--name", default="Walk-in")
    service.add_argument("--phone", default="")
    service.add_argument("--status")

    room = sub.add_parser("room")
    room.add_argument("room_type_id")
    room.add_argument("check_in")
    room.add_argument("check_out")
    room.add_argument("--rooms", type=int, default=1)
    room.add_argument("--user-id")
    room.add_argument("--name", default="Walk-in")
    room.add_argument("--phone", default="")

    status = sub.add_parser("status")
    status.add_argument("booking_id")
    status.add_argument("action", choices=["confirm", "start", "complete", "cancel", "paid"])

    sub.add_parser("auto-cancel")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.command == "auto-cancel":
        result = get_auto_cancel_use_case().execute()
    elif args.command == "service":
        request = ServiceBookingRequest(
            service_id=args.service_id,
            date=args.date,
            time=args.time,
            add_on_names=args.add_on,
            area_index=args.area,
            package_index=args.package,
            user_id=args.user_id,
            coupon_id=args.coupon,
            status=args.status,
            customer_info=CustomerInfoDTO(name=args.name, phone=args.phone),
        )
        result = get_create_booking_use_case().create_service_booking(request, _admin_auth())
    elif args.command == "room":
        request = RoomBookingRequest(
            room_type_id=args.room_type_id,
            check_in_date=args.check_in,
            check_out_date=args.check_out,
            rooms=args.rooms,
            user_id=args.user_id,
            customer_info=CustomerInfoDTO(name=args.name, phone=args.phone),
        )
        result = get_create_booking_use_case().create_room_booking(request, _admin_auth())
    else:
        uc = get_status_transition_use_case()
        auth = _admin_auth()
        actions = {
            "confirm": lambda: uc.confirm(args.booking_id, auth),
            "start": lambda: uc.start(args.booking_id, auth),
            "complete": lambda: uc.complete(args.booking_id, auth),
            "cancel": lambda: uc.cancel(args.booking_id, auth),
            "paid": lambda: uc.mark_paid(args.booking_id, auth),
        }
        result = actions[args.action]()

    _print_result(result)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())

"""Remote control API: the inbound interface of the player."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Path

from tvgate.api.deps import get_service
from tvgate.service import PlayerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/remote", tags=["Remote"])


@router.post("/digit/{digit}")
async def select_digit(
    digit: int = Path(..., ge=0, le=9),
    service: PlayerService = Depends(get_service),
) -> dict[str, Any]:
    """Type one digit of a channel number."""
    service.select_digit(digit)
    return {"accepted": True, "digit_buffer": service.controller.digit_buffer}


@router.post("/cancel-entry")
async def cancel_entry(service: PlayerService = Depends(get_service)) -> dict[str, Any]:
    return {"cancelled": service.cancel_entry()}


@router.post("/up")
async def switch_up(service: PlayerService = Depends(get_service)) -> dict[str, Any]:
    service.switch_up()
    return {"accepted": True, "current_index": service.controller.current_index}


@router.post("/down")
async def switch_down(service: PlayerService = Depends(get_service)) -> dict[str, Any]:
    service.switch_down()
    return {"accepted": True, "current_index": service.controller.current_index}


@router.post("/channel/{index}")
async def switch_to(
    index: int,
    service: PlayerService = Depends(get_service),
) -> dict[str, Any]:
    """Switch to a list index. Out-of-range indices are ignored."""
    service.switch_to(index)
    return {"accepted": True, "current_index": service.controller.current_index}


@router.post("/stop")
async def stop(service: PlayerService = Depends(get_service)) -> dict[str, Any]:
    service.stop()
    return {"accepted": True}


@router.post("/sync")
async def trigger_sync(service: PlayerService = Depends(get_service)) -> dict[str, Any]:
    """Start a time sync; the outcome shows up in /api/status."""
    service.trigger_sync()
    return {"accepted": True}

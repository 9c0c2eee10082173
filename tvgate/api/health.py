"""Health and status endpoints for TVGate"""

import logging
import shutil
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Request

from tvgate import __version__
from tvgate.api.deps import get_service
from tvgate.config import PlaybackConfig
from tvgate.service import PlayerService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


def check_player(playback: PlaybackConfig) -> dict[str, Any]:
    """Check that the configured player binary is installed."""
    if playback.player == "none":
        return {"status": "ok", "player": "none"}

    path = playback.player_path or shutil.which(playback.player)
    if path is None:
        return {"status": "error", "error": f"{playback.player} not found in PATH"}
    return {"status": "ok", "player": playback.player, "path": path}


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """
    Basic health check endpoint.

    Returns:
        dict: Health status, including the preflight guard state
    """
    service = getattr(request.app.state, "service", None)
    return {
        "status": "healthy" if service and service.guard.passed else "degraded",
        "version": __version__,
        "guard": service.guard.state.value if service else "pending",
        "player": check_player(service.config.playback) if service else None,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/status")
async def status(service: PlayerService = Depends(get_service)) -> dict[str, Any]:
    """Session, clock and settings snapshot."""
    return service.status()

"""Settings API for the persisted player settings."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from tvgate.api.deps import get_service
from tvgate.service import PlayerService

router = APIRouter(prefix="/settings", tags=["Settings"])


class ServerEndpointUpdate(BaseModel):
    """Playback server, host or host:port."""
    server_ip: str = Field(..., min_length=1)


class TimeServerUpdate(BaseModel):
    """Time server override; empty clears it."""
    server: str = ""


@router.get("")
async def get_settings(service: PlayerService = Depends(get_service)) -> dict[str, Any]:
    return {
        "server_ip": service.settings.get_server_ip(),
        "time_server": service.settings.get_ntp_server(),
        "last_channel_index": service.settings.get_last_channel_index(),
    }


@router.put("/server")
async def set_server_endpoint(
    update: ServerEndpointUpdate,
    service: PlayerService = Depends(get_service),
) -> dict[str, Any]:
    service.set_server_endpoint(update.server_ip)
    return {"server_ip": service.settings.get_server_ip()}


@router.put("/time-server")
async def set_time_server(
    update: TimeServerUpdate,
    service: PlayerService = Depends(get_service),
) -> dict[str, Any]:
    service.set_time_server(update.server)
    return {"time_server": service.settings.get_ntp_server()}

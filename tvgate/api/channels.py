"""Channel list API."""

import logging
from typing import Any, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from tvgate.api.deps import get_service
from tvgate.service import PlayerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/channels", tags=["Channels"])


class ChannelImport(BaseModel):
    """Either playlist text or a URL to fetch it from."""
    content: Optional[str] = None
    url: Optional[str] = None


@router.get("")
async def list_channels(service: PlayerService = Depends(get_service)) -> list[dict[str, Any]]:
    return [
        {"index": index, **channel.to_dict()}
        for index, channel in enumerate(service.channel_store.channels)
    ]


@router.post("/import")
async def import_channels(
    body: ChannelImport,
    service: PlayerService = Depends(get_service),
) -> dict[str, Any]:
    """Replace the channel list from M3U or name,url text and play the first channel."""
    if body.url:
        try:
            imported = await service.import_channels_url(body.url)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except httpx.HTTPError as e:
            logger.warning(f"Channel import from {body.url} failed: {e}")
            raise HTTPException(status_code=502, detail=f"Could not fetch playlist: {e}")
    elif body.content:
        imported = service.import_channels(body.content)
    else:
        raise HTTPException(status_code=400, detail="Provide content or url")

    return {"imported": imported, "channel_count": len(service.channel_store)}


@router.delete("")
async def clear_channels(service: PlayerService = Depends(get_service)) -> dict[str, Any]:
    service.clear_channels()
    return {"channel_count": 0}

"""Shared FastAPI dependencies."""

from fastapi import HTTPException, Request

from tvgate.service import PlayerService


def get_service(request: Request) -> PlayerService:
    """Return the player service started by the application lifespan."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Player service not started")
    return service

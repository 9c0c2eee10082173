"""
TVGate Main Application

FastAPI application entry point. The HTTP surface is the remote control
and settings UI of the player; playback runs in the local sink.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tvgate import __version__
from tvgate.config import load_config
from tvgate.errors import GuardNotPassed
from tvgate.service import PlayerService

logger = logging.getLogger(__name__)


def create_app(service: Optional[PlayerService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        service: Pre-built player service. Built from the loaded
            configuration at startup when omitted.

    Returns:
        Configured FastAPI application instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(f"Starting TVGate v{__version__}")
        player = service
        if player is None:
            config = load_config()
            logger.info(f"Configuration loaded, server port: {config.server.port}")
            player = PlayerService(config)

        app.state.service = player
        # PreflightFailure propagates and aborts startup
        try:
            await player.start()
        except BaseException:
            await player.close()
            raise
        logger.info("TVGate started successfully")

        yield

        logger.info("Shutting down TVGate")
        await player.close()
        logger.info("TVGate shutdown complete")

    app = FastAPI(
        title="TVGate",
        description="Time-synchronized IPTV player with remote control API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    @app.exception_handler(GuardNotPassed)
    async def guard_not_passed_handler(request: Request, exc: GuardNotPassed) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    from tvgate.api import api_router
    app.include_router(api_router)

    @app.get("/health")
    async def health_check() -> dict:
        """Liveness endpoint."""
        return {"status": "healthy", "version": __version__, "app": "TVGate"}

    return app


app = create_app()


def main() -> None:
    """
    Main entry point for running the server.

    Called when running `python -m tvgate` or via the `tvgate` script.
    """
    import uvicorn
    from tvgate.utils.logging_setup import parse_size, setup_logging

    config = load_config()

    setup_logging(
        log_level=config.logging.level,
        log_file_name=config.logging.file,
        log_to_console=True,
        log_to_file=True,
        max_bytes=parse_size(config.logging.max_size),
        backup_count=config.logging.backup_count,
        log_format=config.logging.format,
    )

    uvicorn.run(
        "tvgate.main:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.server.log_level.lower(),
    )


if __name__ == "__main__":
    main()

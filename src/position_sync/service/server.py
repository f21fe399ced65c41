"""
HTTP trigger for position syncs.

Routes:
- POST /api/sync  body {"startDate": "...", "endDate": "..."}
- GET  /api/sync  ?startDate=...&endDate=...
- GET  /health
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from aiohttp import web

from position_sync.config.settings import SyncSettings
from position_sync.exceptions import ConfigurationError, FetchError, PositionSyncError
from position_sync.exceptions import ValidationError as InputValidationError
from position_sync.filters import validate_date_param
from position_sync.mapping import DEFAULT_FIELD_MAPPING, FieldMapping
from position_sync.orchestrator import SyncOrchestrator
from position_sync.service.errors import APIError, ErrorCode, SyncFailedError, ValidationError
from position_sync.service.middleware import error_middleware
from position_sync.sql.generator import isoformat_z
from position_sync.utils.logging import get_logger

logger = get_logger("position_sync.service")


class SyncService:
    """
    Request handlers around a SyncOrchestrator.

    Overlapping requests are not serialized: each one starts its own run with
    its own accumulator and timestamped output files.
    """

    def __init__(
        self,
        settings: SyncSettings,
        mapping: FieldMapping = DEFAULT_FIELD_MAPPING,
        orchestrator_factory: Callable[[], SyncOrchestrator] | None = None,
    ):
        self.settings = settings
        self.mapping = mapping
        self.orchestrator_factory = orchestrator_factory or (lambda: SyncOrchestrator(self.settings, self.mapping))

    async def handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok", "timestamp": isoformat_z(datetime.now(timezone.utc))})

    async def handle_sync_post(self, request: web.Request) -> web.Response:
        payload: Any = {}
        if request.can_read_body:
            # JSONDecodeError is rendered as INVALID_REQUEST by the middleware
            payload = await request.json()
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise APIError(ErrorCode.INVALID_REQUEST, "Request body must be a JSON object")
        return await self._trigger(payload.get("startDate"), payload.get("endDate"))

    async def handle_sync_get(self, request: web.Request) -> web.Response:
        return await self._trigger(request.query.get("startDate"), request.query.get("endDate"))

    async def _trigger(self, start_date: Any, end_date: Any) -> web.Response:
        try:
            start_date = validate_date_param(start_date, "startDate")
            end_date = validate_date_param(end_date, "endDate")
        except InputValidationError as e:
            raise ValidationError(e.message, details=e.details) from e

        logger.info(f"API called with startDate: {start_date}, endDate: {end_date}")

        try:
            result = await self.orchestrator_factory().run(start_date, end_date)
        except FetchError as e:
            logger.error(f"Sync failed: {e.message}")
            raise SyncFailedError(e.message, code=ErrorCode.UPSTREAM_ERROR) from e
        except ConfigurationError as e:
            logger.error(f"Sync failed: {e.message}")
            raise SyncFailedError(e.message, code=ErrorCode.CONFIGURATION_ERROR) from e
        except PositionSyncError as e:
            logger.error(f"Sync failed: {e.message}")
            raise SyncFailedError(e.message) from e

        return web.json_response(result.to_dict())


def create_app(service: SyncService) -> web.Application:
    """Build the aiohttp application with error middleware and routes."""
    app = web.Application(middlewares=[error_middleware])
    app.add_routes(
        [
            web.get("/health", service.handle_health),
            web.post("/api/sync", service.handle_sync_post),
            web.get("/api/sync", service.handle_sync_get),
        ]
    )
    return app


def run_service(settings: SyncSettings, *, host: str = "0.0.0.0", port: int = 3000) -> None:
    """
    Validate configuration and serve until interrupted (blocking).

    Raises:
        ConfigurationError: If settings are incomplete; nothing is served
    """
    settings.validate()
    logger.info("Configuration validated successfully")

    app = create_app(SyncService(settings))

    async def on_startup(app: web.Application) -> None:
        logger.info("========================================")
        logger.info("SF Position Sync API started")
        logger.info(f"Port: {port}")
        logger.info(f"Health check: http://{host}:{port}/health")
        logger.info(f"Sync endpoint: POST http://{host}:{port}/api/sync")
        logger.info('  Body: { "startDate": "yyyy-MM-dd", "endDate": "yyyy-MM-dd" }')
        logger.info(f"Sync endpoint: GET http://{host}:{port}/api/sync?startDate=yyyy-MM-dd&endDate=yyyy-MM-dd")
        logger.info("========================================")

    app.on_startup.append(on_startup)
    web.run_app(app, host=host, port=port, access_log=None, print=None)

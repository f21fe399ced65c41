"""
HTTP trigger surface for position syncs.
"""

from position_sync.service.server import SyncService, create_app, run_service

__all__ = ["SyncService", "create_app", "run_service"]

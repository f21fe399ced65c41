"""
position-sync - SuccessFactors positions to Oracle/PostgreSQL insert scripts.

Fetches Position records page by page, keeps those in the configured
department, and renders insert-if-absent SQL for each target dialect.
"""

__version__ = "0.1.0"

from position_sync.client import PositionApiClient
from position_sync.config import Config, SyncSettings, load_config
from position_sync.exceptions import (
    ApiResponseError,
    ConfigurationError,
    FetchError,
    OutputError,
    PositionSyncError,
    RetryError,
    ValidationError,
)
from position_sync.fetcher import Page, PageFetcher
from position_sync.filters import build_date_filter, filter_by_prefix
from position_sync.mapping import DEFAULT_FIELD_MAPPING, FieldMapping, transform
from position_sync.orchestrator import PageProgress, SyncOrchestrator, SyncResult, sync_positions
from position_sync.sql import SqlGenerator, escape_text, format_column_value, parse_proprietary_date
from position_sync.utils.logging import get_logger, setup_logging

__all__ = [
    # Pipeline
    "SyncOrchestrator",
    "SyncResult",
    "PageProgress",
    "sync_positions",
    "PositionApiClient",
    "PageFetcher",
    "Page",
    # Transform / SQL
    "FieldMapping",
    "DEFAULT_FIELD_MAPPING",
    "transform",
    "SqlGenerator",
    "parse_proprietary_date",
    "escape_text",
    "format_column_value",
    "build_date_filter",
    "filter_by_prefix",
    # Config
    "Config",
    "SyncSettings",
    "load_config",
    # Logging
    "get_logger",
    "setup_logging",
    # Exceptions
    "PositionSyncError",
    "ConfigurationError",
    "ValidationError",
    "ApiResponseError",
    "RetryError",
    "FetchError",
    "OutputError",
]

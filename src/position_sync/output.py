"""
Writing generated SQL documents to disk.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import aiofiles

from position_sync.exceptions import OutputError
from position_sync.sql.generator import isoformat_z
from position_sync.utils.logging import get_logger

logger = get_logger("position_sync.output")


def file_timestamp(moment: datetime) -> str:
    """ISO instant made filename-safe: ``2024-01-02T03-04-05-678Z``."""
    return isoformat_z(moment).replace(":", "-").replace(".", "-")


def output_path(output_file: str | Path, timestamp: str, dialect: str) -> Path:
    """
    Derive one dialect's file from the configured base name.

    Example:
        >>> output_path("output/positions.sql", "2024-01-02T03-04-05-678Z", "oracle")
        PosixPath('output/positions_2024-01-02T03-04-05-678Z_oracle.sql')
    """
    base = Path(output_file)
    stem = base.name[: -len(".sql")] if base.name.endswith(".sql") else base.name
    return base.with_name(f"{stem}_{timestamp}_{dialect}.sql")


def ensure_parent_dir(path: Path) -> Path:
    """Create the parent directory if needed and return the path."""
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created output directory: {path.parent}")
    return path


async def write_document(path: Path, content: str) -> Path:
    """
    Write a SQL document as UTF-8.

    Raises:
        OutputError: If the file cannot be written
    """
    try:
        ensure_parent_dir(path)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(content)
    except OSError as e:
        raise OutputError(str(path), str(e)) from e
    logger.debug(f"Wrote {len(content)} characters to {path}")
    return path

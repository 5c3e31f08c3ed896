# lapse_api/validation.py
"""
Validation of client-supplied input that reaches the filesystem.
"""
from pathlib import Path
from typing import Optional

from fastapi import HTTPException

from lapse.logging_config import get_logger

logger = get_logger("api.validation")


def resolve_reload_dir(requested: Optional[str], configured: Optional[str]) -> Path:
    """
    Resolve the directory a corpus reload reads from.

    Clients may only pick the configured data directory or a directory
    below it; symlinks and ``..`` are resolved before the check.

    Args:
        requested: ``data_dir`` from the request body, if any
        configured: The LAPSE_DATA_DIR setting

    Returns:
        The resolved directory to load

    Raises:
        HTTPException: 400 if nothing is configured or the directory lies outside it
    """
    if not configured:
        raise HTTPException(status_code=400, detail="LAPSE_DATA_DIR is not set; reloading is disabled")

    root = Path(configured).resolve()
    if not requested:
        return root

    candidate = Path(requested)
    if not candidate.is_absolute():
        candidate = root / candidate
    candidate = candidate.resolve()

    if candidate != root and root not in candidate.parents:
        logger.warning(f"Rejected corpus reload from {requested!r}: outside {root}")
        raise HTTPException(status_code=400, detail="data_dir must lie inside the configured LAPSE_DATA_DIR")
    return candidate

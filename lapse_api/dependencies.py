"""
FastAPI dependencies shared by the route modules.
"""

from typing import Optional

from lapse.config import load_config
from lapse.services.explorer_service import LegislationExplorer

_explorer: Optional[LegislationExplorer] = None


def get_explorer() -> LegislationExplorer:
    """
    Return the process-wide explorer, creating it on first use.

    Tests replace this dependency through ``app.dependency_overrides``.
    """
    global _explorer
    if _explorer is None:
        _explorer = LegislationExplorer(load_config())
    return _explorer

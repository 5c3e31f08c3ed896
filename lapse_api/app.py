"""
FastAPI application exposing the LAPSE legislation explorer.

Main responsibilities:
- Load (and reload) the corpus of legislative paragraphs
- Answer filter queries: items, sections and dropdown options
- Scope keywords for highlighting and compute dashboard statistics
- Export the selection to Excel or CSV

Run locally (example):

    LAPSE_DATA_DIR=data uvicorn lapse_api.app:app --reload --port 8000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from lapse.domain.filters import FilterState
from lapse.exceptions import CorpusNotLoadedError, UnknownDimensionError
from lapse.logging_config import get_logger, setup_logging
from lapse.services.explorer_service import LegislationExplorer
from lapse.services.keyword_scope_service import KeywordScopeResolver
from lapse.settings import get_settings
from lapse_api.dependencies import get_explorer
from lapse_api.middleware import setup_security
from lapse_api.models import (
    AllOptionsResponse,
    CorpusReloadRequest,
    CorpusStatusResponse,
    DiagnosticModel,
    FilterStateModel,
    HighlightSegment,
    ItemModel,
    ItemsResponse,
    KeywordResolveRequest,
    KeywordResolveResponse,
    LegislationModel,
    OptionModel,
    OptionsResponse,
    SectionModel,
    SectionsResponse,
    SummaryResponse,
)
from lapse_api.routes.health import router as health_router
from lapse_api.validation import resolve_reload_dir

# ---------------------------------------------------------------------------
# Logging & app setup
# ---------------------------------------------------------------------------

settings = get_settings()
setup_logging(level=getattr(logging, settings.log_level.upper(), logging.INFO), log_file=settings.log_file)
logger = get_logger("api")

MEDIA_TYPES = {
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv; charset=utf-8",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the configured corpus at startup, if any."""
    if settings.data_dir:
        explorer = get_explorer()
        try:
            explorer.load_directory(settings.data_dir)
        except (FileNotFoundError, ValueError) as e:
            # Readiness stays 503 until a reload succeeds
            logger.error(f"Startup corpus load from {settings.data_dir!r} failed: {e}")
    yield


app = FastAPI(title="LAPSE Legislation Explorer API", version=settings.app_version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_security(app)
app.include_router(health_router, prefix="/api")


@contextmanager
def engine_errors():
    """Translate engine errors into HTTP errors."""
    try:
        yield
    except CorpusNotLoadedError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except UnknownDimensionError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _state(filters: Optional[FilterStateModel]) -> FilterState:
    return filters.to_state() if filters is not None else FilterState()


# ---------------------------------------------------------------------------
# Corpus
# ---------------------------------------------------------------------------


def _corpus_status(explorer: LegislationExplorer) -> CorpusStatusResponse:
    result = explorer.load_result
    return CorpusStatusResponse(
        status="loaded",
        items=len(result.items),
        paragraphs=result.paragraph_count,
        legislation=len(result.legislation),
        diagnostics=[DiagnosticModel.from_diagnostic(d) for d in result.diagnostics],
    )


@app.post("/api/corpus/reload", response_model=CorpusStatusResponse)
def reload_corpus(
    request: Optional[CorpusReloadRequest] = Body(default=None),
    explorer: LegislationExplorer = Depends(get_explorer),
) -> CorpusStatusResponse:
    """
    (Re)load the source tables from a directory.

    Uses ``data_dir`` from the body, which must lie inside LAPSE_DATA_DIR,
    else LAPSE_DATA_DIR itself.
    """
    data_dir = resolve_reload_dir(request.data_dir if request else None, settings.data_dir)

    with engine_errors():
        explorer.load_directory(data_dir)
    logger.info(f"Corpus reloaded via API from {data_dir}")
    return _corpus_status(explorer)


@app.get("/api/corpus", response_model=CorpusStatusResponse)
def corpus_status(explorer: LegislationExplorer = Depends(get_explorer)) -> CorpusStatusResponse:
    with engine_errors():
        return _corpus_status(explorer)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@app.post("/api/items", response_model=ItemsResponse)
def list_items(
    filters: Optional[FilterStateModel] = None,
    explorer: LegislationExplorer = Depends(get_explorer),
) -> ItemsResponse:
    """FlatItems selected by the filters."""
    with engine_errors():
        items = explorer.items(_state(filters))
    return ItemsResponse(total=len(items), items=[ItemModel.from_item(item) for item in items])


@app.post("/api/sections", response_model=SectionsResponse)
def list_sections(
    filters: Optional[FilterStateModel] = None,
    explorer: LegislationExplorer = Depends(get_explorer),
) -> SectionsResponse:
    """
    Sections selected by the filters.

    Paragraphs that satisfied the filters themselves are flagged
    ``matched``; the rest of each section is shown for context.
    """
    state = _state(filters)
    with engine_errors():
        sections = explorer.sections(state)
        matched_ids = explorer.matching_item_ids(state)
        current = explorer.current_legislation(state)

    return SectionsResponse(
        total=len(sections),
        sections=[SectionModel.from_group(group, matched_ids) for group in sections],
        current_legislation=LegislationModel.from_legislation(current) if current else None,
    )


@app.post("/api/options", response_model=AllOptionsResponse)
def list_all_options(
    filters: Optional[FilterStateModel] = None,
    explorer: LegislationExplorer = Depends(get_explorer),
) -> AllOptionsResponse:
    """Dropdown options for every dimension."""
    with engine_errors():
        options = explorer.all_options(_state(filters))
    return AllOptionsResponse(
        options={
            dimension.value: [OptionModel.from_option(o) for o in values]
            for dimension, values in options.items()
        }
    )


@app.post("/api/options/{dimension}", response_model=OptionsResponse)
def list_options(
    dimension: str,
    filters: Optional[FilterStateModel] = None,
    explorer: LegislationExplorer = Depends(get_explorer),
) -> OptionsResponse:
    """Dropdown options for one dimension (e.g. ``act_name`` or ``actName``)."""
    with engine_errors():
        options = explorer.options(_state(filters), dimension)
    return OptionsResponse(dimension=dimension, options=[OptionModel.from_option(o) for o in options])


@app.post("/api/keywords/resolve", response_model=KeywordResolveResponse)
def resolve_keywords(
    request: KeywordResolveRequest,
    explorer: LegislationExplorer = Depends(get_explorer),
) -> KeywordResolveResponse:
    """Scope a row's keywords to the active domain and split the text for highlighting."""
    with engine_errors():
        keywords = explorer.resolve_keywords(request.keywords, request.text, request.domain)

    terms = list(keywords)
    if request.search_term.strip():
        terms.append(request.search_term.strip())
    segments = KeywordScopeResolver.split_highlights(request.text, terms)
    return KeywordResolveResponse(
        keywords=keywords,
        highlights=[HighlightSegment(text=text, match=match) for text, match in segments],
    )


@app.post("/api/summary", response_model=SummaryResponse)
def summary(
    filters: Optional[FilterStateModel] = None,
    explorer: LegislationExplorer = Depends(get_explorer),
) -> SummaryResponse:
    """Dashboard statistics for the selection."""
    with engine_errors():
        result = explorer.summary(_state(filters))
    return SummaryResponse(**result.to_dict())


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


@app.post("/api/export")
def export(
    filters: Optional[FilterStateModel] = None,
    fmt: str = Query("xlsx", alias="format"),
    explorer: LegislationExplorer = Depends(get_explorer),
) -> StreamingResponse:
    """Download the selection as Excel (with a Sections sheet) or CSV."""
    fmt = fmt.lower().lstrip(".")
    with engine_errors():
        content = explorer.export(_state(filters), fmt)

    filename = explorer.config.export.default_filename.rsplit(".", 1)[0] + f".{fmt}"
    return StreamingResponse(
        iter([content]),
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---------------------------------------------------------------------------
# Cache management endpoints
# ---------------------------------------------------------------------------


@app.get("/api/cache/stats")
def get_cache_stats(explorer: LegislationExplorer = Depends(get_explorer)) -> Dict[str, Any]:
    """
    Get corpus cache statistics.

    Returns the number of cached joins, hit/miss counters and per-entry
    access metadata.
    """
    return explorer.cache.get_stats()


@app.post("/api/cache/clear")
def clear_cache(explorer: LegislationExplorer = Depends(get_explorer)) -> Dict[str, Any]:
    """
    Clear the corpus cache.

    The loaded corpus keeps being served; the next reload joins again.
    """
    count = explorer.cache.clear()
    logger.info(f"Cache cleared via API ({count} entries)")
    return {
        "status": "ok",
        "message": f"Cleared {count} cached corpora",
        "cleared_count": count,
    }

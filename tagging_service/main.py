"""
TabTagger v1 - Tagging Service

FastAPI service for LLM-based tag suggestions.
Provides endpoints for analyzing tabs, listing provider models and testing
a provider configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config import get_config

from . import __version__
from .content import HttpContentSource, extract_tabs_content, title_only
from .errors import ConfigError, ProviderError
from .models import (
    AnalysisRequest,
    AnalysisResult,
    AnalyzeTabsRequest,
    ErrorResponse,
    HealthResponse,
    ModelInfo,
    ProviderConfig,
)
from .orchestrator import analyze, check_connection, fetch_models
from .providers import get_registry

cfg = get_config()

# Configure logging
logging.basicConfig(
    level=cfg.app.log_level.upper(),
    format=cfg.app.log_format,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    registry = get_registry()
    logger.info(
        f"Tagging service starting with providers: {registry.list_providers()} "
        f"(default: {cfg.llm.provider}, env: {cfg.app.env})"
    )
    yield
    logger.info("Tagging service shutting down")


app = FastAPI(
    title="TabTagger Tagging Service",
    description="LLM-based tag suggestions for browser tabs",
    version=__version__,
    debug=cfg.app.debug,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _llm_options() -> dict:
    return {
        "timeout": cfg.llm.timeout,
        "max_attempts": cfg.llm.max_retries,
    }


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Check service health."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        default_provider=cfg.llm.provider,
    )


@app.post("/analyze", response_model=AnalysisResult, tags=["Analysis"])
async def analyze_tabs(request: AnalysisRequest):
    """
    Suggest 1-3 tags for each tab using the configured provider.

    Provider failures are reported in the result body (`ok: false`,
    `errorKind`, `message`) rather than as HTTP errors.
    """
    logger.info(f"Analysis request for {len(request.tabs)} tabs via {request.config.kind}")
    return await analyze(request, **_llm_options())


@app.post("/analyze_tabs", response_model=AnalysisResult, tags=["Analysis"])
async def analyze_raw_tabs(request: AnalyzeTabsRequest):
    """
    Fetch page content for each tab, then analyze them.

    Pages that cannot be fetched are analyzed by title only.
    """
    if request.fetch_content:
        source = HttpContentSource(
            timeout=cfg.processing.fetch_timeout,
            max_chars=cfg.processing.content_max_chars,
        )
        tabs = await extract_tabs_content(
            request.tabs, source, max_concurrent=cfg.processing.max_concurrent
        )
    else:
        tabs = [title_only(tab) for tab in request.tabs]

    return await analyze(AnalysisRequest(tabs=tabs, config=request.config), **_llm_options())


@app.post(
    "/models",
    response_model=list[ModelInfo],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid provider configuration"},
        502: {"model": ErrorResponse, "description": "Provider unreachable or failed"},
    },
    tags=["Providers"],
)
async def list_models(config: ProviderConfig):
    """List the models available for a provider configuration."""
    try:
        return await fetch_models(config, timeout=cfg.llm.timeout)
    except ProviderError as e:
        logger.warning(f"Model listing failed for {config.kind}: {e.message}")
        raise HTTPException(
            status_code=400 if isinstance(e, ConfigError) else 502,
            detail=ErrorResponse(
                error="Model listing failed",
                detail=e.message,
                error_kind=e.kind,
                status=e.status,
            ).model_dump(mode="json", by_alias=True),
        )


@app.post("/test_connection", response_model=AnalysisResult, tags=["Providers"])
async def test_connection(config: ProviderConfig):
    """Analyze two sample tabs to verify a provider configuration end to end."""
    return await check_connection(config, **_llm_options())


# Run with: uvicorn tagging_service.main:app --host 0.0.0.0 --port 8003
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8003)

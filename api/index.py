"""
FastAPI wrapper for the Keyword Intelligence Engine - Vercel Serverless Function.

This module exposes intent resolution, ranking alerts, recommendation
ranking and override recording as a REST API. The API is stateless:
callers send the site's override store with each request and persist
the store returned by the override endpoint.
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from keyword_intelligence import __version__
from keyword_intelligence.engine import KeywordIntelligenceEngine
from keyword_intelligence.intent_classifier import classify_with_stage
from keyword_intelligence.keyword_loader import KeywordLoadError, parse_checklists
from keyword_intelligence.models import (
    AlertTag,
    HistoricalPositions,
    Intent,
    KeywordMetric,
    OverrideStore,
    RankedItem,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Keyword Intelligence API",
    description="Keyword intent classification, ranking alerts and recommendation prioritization",
    version=__version__,
)

# Enable CORS for all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SiteContext(BaseModel):
    """Per-site context shared by intent-aware requests."""
    site_url: Optional[str] = Field(None, description="Site URL or sc-domain: property")
    competitor_brands: list[str] = Field(default_factory=list, description="Competitor brand names")
    override_store: Optional[dict] = Field(None, description="Persisted override store JSON")
    ai_intents: dict[str, str] = Field(default_factory=dict, description="AI intents keyed by lowercased keyword")


class KeywordMetricInput(BaseModel):
    """Search Console metrics for one keyword."""
    keyword: str
    position: Optional[float] = None
    impressions: Optional[int] = None
    clicks: Optional[int] = None
    ctr: Optional[float] = None


class HistoricalInput(BaseModel):
    """Three-period historical position averages, oldest to newest."""
    period1: Optional[float] = None
    period2: Optional[float] = None
    period3: Optional[float] = None


class ClassifyRequest(BaseModel):
    """Request model for rule-based classification."""
    keyword: str
    ranking_url: Optional[str] = None
    site_url: Optional[str] = None
    competitor_brands: list[str] = Field(default_factory=list)


class ClassifyResponse(BaseModel):
    intent: str
    stage: str


class ResolveRequest(SiteContext):
    """Request model for effective intent resolution."""
    keywords: list[str] = Field(..., description="Keywords to resolve")
    ranking_urls: dict[str, str] = Field(default_factory=dict, description="Top ranking URL per keyword")


class ResolvedIntentOutput(BaseModel):
    intent: str
    source: str


class ResolveResponse(BaseModel):
    intents: dict[str, ResolvedIntentOutput]


class AlertsRequest(SiteContext):
    """Request model for ranking alerts."""
    metrics: list[KeywordMetricInput]
    historical: dict[str, HistoricalInput] = Field(default_factory=dict)
    ranking_urls: dict[str, str] = Field(default_factory=dict)


class AlertsResponse(BaseModel):
    alerts: dict[str, list[str]]
    counts: dict[str, int]


class RankRequest(BaseModel):
    """Request model for group recommendation ranking."""
    checklists: dict[str, Optional[list[dict]]] = Field(
        ..., description="Checklist items per keyword; null for unscanned keywords"
    )
    metrics: list[KeywordMetricInput] = Field(default_factory=list)
    volumes: dict[str, Optional[int]] = Field(default_factory=dict)


class RankedItemOutput(BaseModel):
    keyword: str
    task: dict
    keyword_value: int
    is_conflict: bool
    is_primary: bool


class ConflictGroupOutput(BaseModel):
    page: str
    category: str
    items: list[RankedItemOutput]


class RankResponse(BaseModel):
    ranked_items: list[RankedItemOutput]
    deprioritized_count: int
    conflicts: list[ConflictGroupOutput]


class OverrideRequest(BaseModel):
    """Request model for recording an intent override."""
    keyword: str
    intent: str
    all_site_keywords: list[str] = Field(default_factory=list)
    override_store: Optional[dict] = None


class OverrideResponse(BaseModel):
    override_store: dict
    affected: dict[str, str]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


def _parse_store(data: Optional[dict]) -> OverrideStore:
    try:
        return OverrideStore.from_dict(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Malformed override store: {e}")


def _engine_for(context: SiteContext) -> KeywordIntelligenceEngine:
    return KeywordIntelligenceEngine(
        site_url=context.site_url,
        competitor_brands=context.competitor_brands,
        override_store=_parse_store(context.override_store),
        ai_intents=context.ai_intents,
    )


def _to_metric(metric: KeywordMetricInput) -> KeywordMetric:
    return KeywordMetric(
        keyword=metric.keyword,
        position=metric.position,
        impressions=metric.impressions,
        clicks=metric.clicks,
        ctr=metric.ctr,
    )


def _ranked_item_output(item: RankedItem) -> RankedItemOutput:
    return RankedItemOutput(
        keyword=item.keyword,
        task=item.task.to_dict(),
        keyword_value=item.keyword_value,
        is_conflict=item.is_conflict,
        is_primary=item.is_primary,
    )


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@app.post("/api/classify", response_model=ClassifyResponse)
async def classify(request: ClassifyRequest):
    """Classify one keyword with the rule-based cascade only."""
    intent, stage = classify_with_stage(
        request.keyword,
        request.ranking_url,
        request.site_url,
        request.competitor_brands,
    )
    return ClassifyResponse(intent=intent.value, stage=stage)


@app.post("/api/resolve", response_model=ResolveResponse)
async def resolve(request: ResolveRequest):
    """Resolve effective intents (override, learned, AI, auto)."""
    engine = _engine_for(request)
    resolved = engine.resolve_all(request.keywords, request.ranking_urls)
    return ResolveResponse(
        intents={
            keyword: ResolvedIntentOutput(intent=r.intent.value, source=r.source.value)
            for keyword, r in resolved.items()
        }
    )


@app.post("/api/alerts", response_model=AlertsResponse)
async def alerts(request: AlertsRequest):
    """Compute fire/smoking/hot alerts for a reporting period."""
    engine = _engine_for(request)
    metrics = [_to_metric(m) for m in request.metrics]
    history = {
        keyword: HistoricalPositions(h.period1, h.period2, h.period3)
        for keyword, h in request.historical.items()
    }
    report = engine.scan_alerts(metrics, history, request.ranking_urls)
    counts = report.counts
    return AlertsResponse(
        alerts={
            keyword: [tag.value for tag in AlertTag if tag in tags]
            for keyword, tags in report.alerts.items()
        },
        counts={tag.value: counts[tag] for tag in AlertTag},
    )


@app.post("/api/rank", response_model=RankResponse)
async def rank(request: RankRequest):
    """Rank a keyword group's recommendations with conflict resolution."""
    try:
        checklists = parse_checklists(request.checklists)
    except KeywordLoadError as e:
        raise HTTPException(status_code=400, detail=str(e))

    engine = KeywordIntelligenceEngine()
    result = engine.rank_group(
        checklists,
        [_to_metric(m) for m in request.metrics],
        request.volumes,
    )
    return RankResponse(
        ranked_items=[_ranked_item_output(item) for item in result.ranked_items],
        deprioritized_count=len(result.deprioritized_items),
        conflicts=[
            ConflictGroupOutput(
                page=group.page,
                category=group.category,
                items=[_ranked_item_output(item) for item in group.items],
            )
            for group in result.conflicts
        ],
    )


@app.post("/api/overrides", response_model=OverrideResponse)
async def record_override(request: OverrideRequest):
    """Record a user's intent override and propagate it to similar keywords."""
    intent = Intent.parse(request.intent)
    if intent is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown intent '{request.intent}'. Expected one of: "
                   f"{', '.join(i.value for i in Intent)}",
        )

    engine = KeywordIntelligenceEngine(override_store=_parse_store(request.override_store))
    result = engine.record_override(request.keyword, intent, request.all_site_keywords)
    logger.info(f"Override {request.keyword!r} -> {intent.value}, {len(result.affected)} propagated")
    return OverrideResponse(
        override_store=result.store.to_dict(),
        affected={keyword: i.value for keyword, i in result.affected.items()},
    )


@app.get("/api/info")
async def api_info():
    """Get API information and usage instructions."""
    return {
        "name": "Keyword Intelligence API",
        "version": __version__,
        "endpoints": {
            "GET /api/health": "Health check",
            "POST /api/classify": "Rule-based intent classification for one keyword",
            "POST /api/resolve": "Effective intents with provenance",
            "POST /api/alerts": "Fire / smoking / hot ranking alerts with per-tag counts",
            "POST /api/rank": "Ranked group recommendations with conflict groups",
            "POST /api/overrides": "Record an intent override, returns the updated store",
            "GET /api/info": "This endpoint",
        },
        "documentation": "/docs",
        "openapi": "/openapi.json",
    }

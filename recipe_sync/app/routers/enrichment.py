# recipe_sync/app/routers/enrichment.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from starlette.concurrency import run_in_threadpool

from recipe_sync.app.deps import (
    get_enrichment_finder,
    get_enrichment_processor,
    get_enrichment_runner,
)
from recipe_sync.app.domain.errors import CatalogRepositoryError
from recipe_sync.app.routers.common import serialize_errors, upstream_http_error
from recipe_sync.app.schemas.enrichment import (
    EnrichmentCandidateOut,
    EnrichmentStatsOut,
    FindRequest,
    FindResponse,
    ProcessRequest,
    ProcessResponse,
    RunRequest,
    RunResponse,
    RunStatsOut,
)
from recipe_sync.app.services.enrichment_finder import EnrichmentFinder
from recipe_sync.app.services.enrichment_processor import EnrichmentProcessor
from recipe_sync.app.services.enrichment_runner import EnrichmentRunner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/enrichment", tags=["enrichment"])


@router.post("/find", response_model=FindResponse)
async def find_recipes_needing_enrichment(
    payload: FindRequest,
    finder: EnrichmentFinder = Depends(get_enrichment_finder),
) -> FindResponse:
    try:
        report = await run_in_threadpool(finder.find, payload.user_id)
    except CatalogRepositoryError as exc:
        logger.error("Enrichment lookup failed: user=%s, error=%s", payload.user_id, exc)
        raise upstream_http_error(exc)

    total = report.stats.total_recipes_needing_enrichment
    return FindResponse(
        stats=EnrichmentStatsOut.model_validate(report.stats),
        recipes=[EnrichmentCandidateOut.model_validate(c) for c in report.recipes],
        message=f"Found {total} recipes that need enrichment",
    )


@router.post("/process", response_model=ProcessResponse)
async def process_enrichment_batch(
    payload: ProcessRequest,
    processor: EnrichmentProcessor = Depends(get_enrichment_processor),
) -> ProcessResponse:
    try:
        result = await run_in_threadpool(
            processor.process_batch, payload.recipe_ids, payload.max_batch_size
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except CatalogRepositoryError as exc:
        logger.error("Enrichment batch failed: error=%s", exc)
        raise upstream_http_error(exc)

    return ProcessResponse(
        batch_size=result.batch_size,
        processed=result.processed,
        successful_transcript=result.successful_transcript,
        successful_ingredients=result.successful_ingredients,
        errors=serialize_errors(result.errors),
        remaining_recipe_ids=result.remaining_recipe_ids,
        has_more=result.has_more,
        message=(
            f"Processed {result.processed} recipes. "
            f"{len(result.remaining_recipe_ids)} remaining."
        ),
    )


@router.post("/run", response_model=RunResponse)
async def run_enrichment(
    payload: RunRequest,
    runner: EnrichmentRunner = Depends(get_enrichment_runner),
) -> RunResponse:
    try:
        summary = await run_in_threadpool(
            runner.run, payload.user_id, payload.batch_size, payload.max_recipes
        )
    except CatalogRepositoryError as exc:
        logger.error("Enrichment run failed: user=%s, error=%s", payload.user_id, exc)
        raise upstream_http_error(exc)

    if summary.recipes_found == 0:
        message = "All recipes already have transcripts and ingredients"
    else:
        message = (
            f"Enriched {summary.recipes_processed} recipes "
            f"({summary.transcripts_added} transcripts, {summary.ingredients_added} ingredient lists)"
        )
    return RunResponse(
        stats=RunStatsOut(
            recipes_found=summary.recipes_found,
            recipes_processed=summary.recipes_processed,
            transcripts_added=summary.transcripts_added,
            ingredients_added=summary.ingredients_added,
            total_enriched=summary.total_enriched,
            errors=len(summary.errors),
            success_rate=summary.success_rate,
            playlists_affected=len(summary.playlists),
        ),
        errors=serialize_errors(summary.errors),
        playlists=summary.playlists,
        message=message,
    )

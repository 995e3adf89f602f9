"""
FastAPI router module for Location Consensus endpoints.

Exposes the GPS consensus location-fraud detection engine to the dashboard. The
dashboard posts the visit slice it already fetched from the visit sheet; every
request recomputes the analysis from that slice.

Endpoints:
- POST /location-consensus/analyze: Full analysis (shops, salesmen, overview)
- POST /location-consensus/shops: Filtered, sorted, paged shop table
- POST /location-consensus/salesmen: Per-salesman consensus accuracy
- POST /location-consensus/analyze-sheet: Full analysis of a visit sheet CSV export

Dependencies:
- salesops/core/dependencies.py: SettingsDep for thresholds and page sizes
- salesops/services/consensus_engine.py: analyze_location_consensus
- salesops/services/consensus_queries.py: query_shops
- salesops/services/visit_normalizer.py: read_visit_sheet
"""

import io
import logging
from typing import List

from fastapi import APIRouter, HTTPException, Request

from salesops.core.dependencies import SettingsDep
from salesops.models.schemas import (
    ConsensusAnalysisRequest,
    ConsensusAnalysisResult,
    SalesmanConsensusAccuracy,
    ShopConsensusPage,
    ShopConsensusQuery,
)
from salesops.services.consensus_engine import analyze_location_consensus
from salesops.services.consensus_queries import query_shops
from salesops.services.visit_normalizer import read_visit_sheet

logger = logging.getLogger(__name__)


# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    prefix="/location-consensus",
    tags=["location-consensus"],
    responses={
        422: {"description": "Validation error in request"},
        500: {"description": "Internal server error during processing"},
    },
)


# =============================================================================
# POST /location-consensus/analyze - Full consensus analysis
# =============================================================================


@router.post("/analyze", response_model=ConsensusAnalysisResult)
async def analyze_visits(
    request: ConsensusAnalysisRequest,
    settings: SettingsDep,
) -> ConsensusAnalysisResult:
    """
    Run consensus location-fraud detection over a slice of visits.

    Args:
        request: ConsensusAnalysisRequest containing the raw visit entries
        settings: Application settings (clustering radius, thresholds)

    Returns:
        ConsensusAnalysisResult containing:
            - shops: LocationConsensus per shop with at least one valid visit
            - salesmen: SalesmanConsensusAccuracy sorted by consistency rate
            - overview: Network-wide consensus summary
            - validVisits / droppedVisits: Normalization counts

    Raises:
        HTTPException 500: If the analysis fails unexpectedly
    """
    try:
        return analyze_location_consensus(request.visits, settings=settings)
    except Exception as e:
        logger.exception("Location consensus analysis failed")
        raise HTTPException(
            status_code=500,
            detail=f"Error analyzing location consensus: {str(e)}",
        )


# =============================================================================
# POST /location-consensus/shops - Shop consensus table
# =============================================================================


@router.post("/shops", response_model=ShopConsensusPage)
async def list_shop_consensus(
    query: ShopConsensusQuery,
    settings: SettingsDep,
) -> ShopConsensusPage:
    """
    Return one page of the shop consensus table.

    Filters (consensus level, fraud risk, salesman, free-text search, suspicious
    only) are applied first, then sorting, then paging. pageSize defaults to
    settings.default_page_size and is capped at settings.max_page_size.

    Raises:
        HTTPException 500: If the analysis fails unexpectedly
    """
    try:
        result = analyze_location_consensus(query.visits, settings=settings)
        return query_shops(
            result.shops,
            query,
            default_page_size=settings.default_page_size,
            max_page_size=settings.max_page_size,
        )
    except Exception as e:
        logger.exception("Shop consensus query failed")
        raise HTTPException(
            status_code=500,
            detail=f"Error querying shop consensus: {str(e)}",
        )


# =============================================================================
# POST /location-consensus/salesmen - Salesman consensus accuracy
# =============================================================================


@router.post("/salesmen", response_model=List[SalesmanConsensusAccuracy])
async def list_salesman_accuracy(
    request: ConsensusAnalysisRequest,
    settings: SettingsDep,
) -> List[SalesmanConsensusAccuracy]:
    """
    Return consensus accuracy per salesman, highest consistency rate first.

    Raises:
        HTTPException 500: If the analysis fails unexpectedly
    """
    try:
        return analyze_location_consensus(request.visits, settings=settings).salesmen
    except Exception as e:
        logger.exception("Salesman consensus accuracy failed")
        raise HTTPException(
            status_code=500,
            detail=f"Error computing salesman accuracy: {str(e)}",
        )


# =============================================================================
# POST /location-consensus/analyze-sheet - Analysis of a visit sheet CSV export
# =============================================================================


@router.post(
    "/analyze-sheet",
    response_model=ConsensusAnalysisResult,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"text/csv": {"schema": {"type": "string"}}},
        }
    },
)
async def analyze_visit_sheet(
    request: Request,
    settings: SettingsDep,
) -> ConsensusAnalysisResult:
    """
    Run consensus analysis over a visit sheet CSV export posted as the raw body.

    Every CSV row is one raw visit keyed by its column headers, so the same
    aliased field names as /analyze apply. An empty or unparsable file gives an
    empty result.

    Raises:
        HTTPException 500: If the analysis fails unexpectedly
    """
    content = await request.body()
    try:
        raw_visits = read_visit_sheet(io.BytesIO(content))
        return analyze_location_consensus(raw_visits, settings=settings)
    except Exception as e:
        logger.exception("Visit sheet consensus analysis failed")
        raise HTTPException(
            status_code=500,
            detail=f"Error analyzing visit sheet: {str(e)}",
        )

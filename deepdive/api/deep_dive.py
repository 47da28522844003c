"""
FastAPI router module for the deep-dive endpoints.

Endpoints:
- POST /deep-dive: Two-period comparison of one perspective, with optional
  drill-down (parentId) and tier filter (tierFilter)
- GET /deep-dive/perspectives: Perspective metadata for the UI

Error mapping:
- InvalidPerspective / InvalidTierFilter / InvalidParentId -> 400
- AdapterFailure (warehouse or membership unavailable) -> 502
- anything else -> 500
Request body schema violations are rejected by FastAPI with 422.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException

from deepdive.core.dependencies import (
    AggregationAdapterDep,
    HistoryAdapterDep,
    MembershipAdapterDep,
    SettingsDep,
)
from deepdive.core.exceptions import (
    AdapterFailure,
    InvalidParentId,
    InvalidPerspective,
    InvalidTierFilter,
)
from deepdive.models import (
    PERSPECTIVE_CONFIGS,
    DeepDiveRequest,
    DeepDiveResponse,
    PerspectiveInfo,
)
from deepdive.services.deep_dive import run_deep_dive

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deep-dive", tags=["deep-dive"])


@router.post("", response_model=DeepDiveResponse)
async def deep_dive(
    request: DeepDiveRequest,
    aggregation: AggregationAdapterDep,
    membership: MembershipAdapterDep,
    history: HistoryAdapterDep,
    settings: SettingsDep,
) -> DeepDiveResponse:
    """
    Run a deep-dive comparison.

    With `parentId`, `perspective` names the parent level and the response
    holds the children of that entity; `context.perspective` reports the
    child level.

    Args:
        request: Perspective, periods, filters, optional parentId / tierFilter.

    Returns:
        DeepDiveResponse with rows sorted by period 2 revenue, the summary of
        the returned rows and the effective context.

    Raises:
        HTTPException 400: Invalid perspective or tier filter.
        HTTPException 502: A data source failed.
        HTTPException 500: Unexpected error.
    """
    try:
        response = await run_deep_dive(
            request,
            aggregation=aggregation,
            membership=membership,
            history=history,
            lost_impact_months=settings.lost_impact_months,
            history_concurrency=settings.history_query_concurrency,
        )
        logger.info(
            f"Deep dive {response.context.perspective}: "
            f"{response.summary.total_items} rows returned"
        )
        return response

    except HTTPException:
        raise
    except (InvalidPerspective, InvalidTierFilter, InvalidParentId) as e:
        logger.warning(f"Rejected deep-dive request: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except AdapterFailure as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        logger.exception("Error running deep dive")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to run deep dive: {str(e)}"
        )


@router.get("/perspectives", response_model=List[PerspectiveInfo])
async def list_perspectives() -> List[PerspectiveInfo]:
    """Perspectives in hierarchy order with their drill-down child."""
    return [
        PerspectiveInfo(
            id=config.perspective.value,
            displayName=config.display_name,
            childPerspective=config.child.value if config.child else None,
            isLeaf=config.is_leaf,
        )
        for config in PERSPECTIVE_CONFIGS.values()
    ]

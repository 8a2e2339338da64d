"""Portfolio listing and snapshot endpoints."""

from fastapi import APIRouter, Depends

from portfolio_helper.api.deps import get_registry, get_snapshot_service
from portfolio_helper.api.schemas import (
    PortfolioListResponse,
    PortfolioSummaryResponse,
    SnapshotResponse,
)
from portfolio_helper.services import PortfolioRegistry, SnapshotService

router = APIRouter(prefix="/api/portfolios", tags=["portfolios"])


@router.get("", response_model=PortfolioListResponse)
def list_portfolios(registry: PortfolioRegistry = Depends(get_registry)) -> PortfolioListResponse:
    """List registered portfolios, main first."""
    return PortfolioListResponse(
        portfolios=[PortfolioSummaryResponse(id=p.id, name=p.name) for p in registry.all()]
    )


@router.get("/{portfolio_id}/snapshot", response_model=SnapshotResponse)
def get_snapshot(
    portfolio_id: str,
    snapshots: SnapshotService = Depends(get_snapshot_service),
) -> SnapshotResponse:
    """Valuation snapshot from the current caches (never triggers a fetch)."""
    return SnapshotResponse.model_validate(snapshots.portfolio_snapshot(portfolio_id))

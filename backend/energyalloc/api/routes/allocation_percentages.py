import logging

from fastapi import APIRouter, Depends, HTTPException, status

from energyalloc.api.deps import get_allocation_store, get_app_settings
from energyalloc.core.config import Settings
from energyalloc.schemas.allocation import (
    AllocationEntryOut,
    AnnotateRequest,
    AnnotateResponse,
    AutoSplitRequest,
    AutoSplitResponse,
    InitialPercentagesResponse,
    MonthRowsOut,
    SaveAllocationRequest,
    SaveAllocationResponse,
    SitesRequest,
    TotalValidationOut,
    ValidateRequest,
)
from energyalloc.services.auto_split import auto_split
from energyalloc.services.reconciliation import validate_total
from energyalloc.services.store import (
    AllocationPercentageEntry,
    AllocationStore,
    annotate_allocated_percentages,
    build_entries,
    initial_percentages,
    load_allocation_percentages,
    save_allocation_percentages,
)
from energyalloc.utils.periods import group_rows_by_month


router = APIRouter(prefix="/allocation-percentages", tags=["allocation-percentages"])
logger = logging.getLogger("energyalloc.api.allocation")


@router.get("", response_model=list[AllocationEntryOut])
def list_allocation_percentages(
    store: AllocationStore = Depends(get_allocation_store),
    settings: Settings = Depends(get_app_settings),
) -> list[AllocationEntryOut]:
    entries = load_allocation_percentages(store, settings.allocation_store_key)
    return [AllocationEntryOut.model_validate(entry) for entry in entries]


@router.put("", response_model=SaveAllocationResponse)
def save_allocation(
    payload: SaveAllocationRequest,
    store: AllocationStore = Depends(get_allocation_store),
    settings: Settings = Depends(get_app_settings),
) -> SaveAllocationResponse:
    entries = [
        AllocationPercentageEntry(
            site_name=item.site_name,
            consumption_site_id=item.consumption_site_id,
            percentage=item.percentage,
        )
        for item in payload.entries
    ]
    outcome = save_allocation_percentages(
        store,
        entries,
        key=settings.allocation_store_key,
        tolerance=settings.allocation_tolerance,
    )
    if not outcome.saved:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=outcome.validation.reasons,
        )
    return SaveAllocationResponse(
        entries=[AllocationEntryOut.model_validate(entry) for entry in outcome.entries],
        validation=TotalValidationOut.model_validate(outcome.validation),
        message="Allocation percentages saved.",
    )


@router.post("/auto-split", response_model=AutoSplitResponse)
def run_auto_split(
    payload: AutoSplitRequest,
    settings: Settings = Depends(get_app_settings),
) -> AutoSplitResponse:
    if not payload.sites:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No consumption sites available.",
        )
    strategy = payload.strategy or settings.auto_split_strategy
    percentages = auto_split(payload.sites, strategy)
    entries = build_entries(payload.sites, percentages)
    validation = validate_total(percentages, settings.allocation_tolerance)
    if not validation.valid:
        logger.warning("Auto split over %d sites totals %s", len(payload.sites), validation.total)
    return AutoSplitResponse(
        strategy=strategy,
        percentages=percentages,
        entries=[AllocationEntryOut.model_validate(entry) for entry in entries],
        validation=TotalValidationOut.model_validate(validation),
    )


@router.post("/initial", response_model=InitialPercentagesResponse)
def get_initial_percentages(
    payload: SitesRequest,
    store: AllocationStore = Depends(get_allocation_store),
    settings: Settings = Depends(get_app_settings),
) -> InitialPercentagesResponse:
    saved = load_allocation_percentages(store, settings.allocation_store_key)
    percentages = initial_percentages(payload.sites, saved)
    entries = build_entries(payload.sites, percentages)
    return InitialPercentagesResponse(
        percentages=percentages,
        entries=[AllocationEntryOut.model_validate(entry) for entry in entries],
    )


@router.post("/validate", response_model=TotalValidationOut)
def validate_percentages(
    payload: ValidateRequest,
    settings: Settings = Depends(get_app_settings),
) -> TotalValidationOut:
    return TotalValidationOut.model_validate(validate_total(payload.percentages, settings.allocation_tolerance))


@router.post("/annotate", response_model=AnnotateResponse)
def annotate_rows(
    payload: AnnotateRequest,
    store: AllocationStore = Depends(get_allocation_store),
    settings: Settings = Depends(get_app_settings),
) -> AnnotateResponse:
    saved = load_allocation_percentages(store, settings.allocation_store_key)
    rows = annotate_allocated_percentages(payload.rows, saved)
    return AnnotateResponse(
        rows=rows,
        months=[MonthRowsOut(month=month, rows=list(group)) for month, group in group_rows_by_month(rows)],
    )

from fastapi import APIRouter

from energyalloc.schemas.shareholdings import (
    AllocateRequest,
    AllocateResponse,
    NormalizedShareholdingOut,
    NormalizeRequest,
)
from energyalloc.services.allocation import allocate
from energyalloc.services.shareholding import normalize, percentage_for


router = APIRouter(prefix="/shareholdings", tags=["shareholdings"])


@router.post("/normalize", response_model=list[NormalizedShareholdingOut])
def normalize_shareholdings(payload: NormalizeRequest) -> list[NormalizedShareholdingOut]:
    return [NormalizedShareholdingOut.model_validate(row) for row in normalize(payload.records)]


@router.post("/allocate", response_model=AllocateResponse)
def allocate_units(payload: AllocateRequest) -> AllocateResponse:
    normalized = normalize(payload.records)
    return AllocateResponse(
        company_id=payload.company_id,
        normalized_percentage=percentage_for(payload.company_id, normalized),
        allocated_units=allocate(payload.total_units, payload.company_id, normalized),
    )

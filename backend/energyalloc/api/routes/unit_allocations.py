from fastapi import APIRouter

from energyalloc.schemas.unit_allocation import AllocationOutcomeOut, UnitAllocationRequest
from energyalloc.services.unit_allocation import calculate_allocations


router = APIRouter(prefix="/unit-allocations", tags=["unit-allocations"])


@router.post("/calculate", response_model=AllocationOutcomeOut)
def calculate_unit_allocations(payload: UnitAllocationRequest) -> AllocationOutcomeOut:
    outcome = calculate_allocations(
        production_units=payload.production_units,
        consumption_units=payload.consumption_units,
        banking_units=payload.banking_units,
    )
    return AllocationOutcomeOut.model_validate(outcome)

from fastapi import APIRouter

from energyalloc.api.routes import allocation_percentages, compliance, health, shareholdings, unit_allocations


api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(shareholdings.router)
api_router.include_router(allocation_percentages.router)
api_router.include_router(unit_allocations.router)
api_router.include_router(compliance.router)

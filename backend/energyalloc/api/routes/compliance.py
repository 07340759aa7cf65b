from fastapi import APIRouter, Depends, HTTPException, status

from energyalloc.api.deps import get_app_settings
from energyalloc.core.config import Settings
from energyalloc.schemas.compliance import FormVAMetricsOut, FormVARequest, FormVBMetricsOut, FormVBRequest
from energyalloc.services.compliance import form_va_metrics, form_vb_metrics


router = APIRouter(prefix="/compliance", tags=["compliance"])


@router.post("/form-va", response_model=FormVAMetricsOut)
def build_form_va(
    payload: FormVARequest,
    settings: Settings = Depends(get_app_settings),
) -> FormVAMetricsOut:
    try:
        metrics = form_va_metrics(
            payload.financial_year,
            production_rows=payload.production_rows,
            consumption_rows=payload.consumption_rows,
            banking_rows=payload.banking_rows,
            sites=payload.sites,
            auxiliary_rate=payload.auxiliary_rate if payload.auxiliary_rate is not None else settings.auxiliary_consumption_rate,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return FormVAMetricsOut.model_validate(metrics)


@router.post("/form-vb", response_model=FormVBMetricsOut)
def build_form_vb(
    payload: FormVBRequest,
    settings: Settings = Depends(get_app_settings),
) -> FormVBMetricsOut:
    try:
        metrics = form_vb_metrics(
            payload.financial_year,
            production_rows=payload.production_rows,
            allocation_rows=payload.allocation_rows,
            sites=payload.sites,
            auxiliary_rate=payload.auxiliary_rate if payload.auxiliary_rate is not None else settings.auxiliary_consumption_rate,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return FormVBMetricsOut.model_validate(metrics)

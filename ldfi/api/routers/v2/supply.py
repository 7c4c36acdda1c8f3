from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from typing import Annotated
from ldfi.api.dependencies import get_supply_service
from ldfi.supply import SupplyService
from ldfi.utils import format_amount

router = APIRouter(
    prefix="/v2"
)

@router.get("/circulating", response_class=PlainTextResponse)
def circulating_supply(service: Annotated[SupplyService, Depends(get_supply_service)]):
    return format_amount(service.get_circulating_supply())

@router.get("/total", response_class=PlainTextResponse)
def total_supply(service: Annotated[SupplyService, Depends(get_supply_service)]):
    return format_amount(service.get_total_supply())

@router.get("/max", response_class=PlainTextResponse)
def max_supply(service: Annotated[SupplyService, Depends(get_supply_service)]):
    return format_amount(service.get_max_supply())

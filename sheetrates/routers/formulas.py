from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel

from sheetrates.routers.rates import get_rate_client
from sheetrates.services import formulas
from sheetrates.services.rates.cache_service import RateFetchClient

router = APIRouter(prefix="/formulas", tags=["formulas"])


class FormulaResult(BaseModel):
    formula: str
    value: float | int | str


@router.get("/text-stats", summary="Word / character / sentence counts")
async def text_stats(text: str = Query(..., description="Text to analyse")) -> Dict[str, float | int]:
    return formulas.text_stats(text)


@router.get("/emails", summary="E-mail addresses found in text")
async def emails(text: str = Query(...)) -> Dict[str, List[str]]:
    return {"emails": formulas.extract_emails(text)}


@router.get("/roi", response_model=FormulaResult, summary="Return on investment (%)")
async def roi(gain: float = Query(...), cost: float = Query(...)):
    try:
        value = formulas.roi(gain, cost)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return FormulaResult(formula="ROI", value=value)


@router.get("/fibonacci/{n}", response_model=FormulaResult, summary="n-th Fibonacci number")
async def fibonacci(n: int = Path(..., ge=0, le=formulas.FIBONACCI_MAX_N)):
    # Large terms exceed float precision in JSON clients; send them as strings
    value = formulas.fibonacci(n)
    return FormulaResult(formula="FIBONACCI", value=value if value < 2**53 else str(value))


@router.get("/convert", response_model=FormulaResult, summary="Sheet-style currency conversion")
def convert(
    amount: float = Query(...),
    from_currency: str = Query(..., alias="from"),
    to_currency: str = Query(..., alias="to"),
    placeholder: str = Query(formulas.DEFAULT_PLACEHOLDER, max_length=32),
    client: RateFetchClient = Depends(get_rate_client),
):
    value = formulas.convert_currency(
        amount, from_currency, to_currency, client, placeholder=placeholder
    )
    return FormulaResult(formula="CONVERTCURRENCY", value=value)

import locale
import logging
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, UploadFile, File, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from .aggregate import ViewConfig, format_amount, summarize
from .loader import SourceError, load_csv_text, load_rate_table
from .models import ColumnTotalResponse, HealthResponse, SummaryResponse
from .normalize import SalesCsvError, read_table, sum_column, to_records
from .parser import decode_csv_bytes
from .rates import RateTable, parse_rate_json
from .rules import ALL_REGIONS, DEFAULT_SUM_COLUMN
from .settings import load_settings

logging.basicConfig(level=load_settings().log_level)
logger = logging.getLogger(__name__)

try:
    locale.setlocale(locale.LC_COLLATE, "")
except locale.Error:
    logger.warning("Locale from the environment is unavailable, sorting by code point")

app = FastAPI(
    title="salesboard",
    description="Sales totals per product from a CSV, with region filter and currency conversion",
    version="0.1.0",
)


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    logger.exception("%s %s failed", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _require_csv(file: UploadFile) -> None:
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")


def _summary(text: str, rates: RateTable, region: Optional[str], currency: Optional[str]) -> dict:
    try:
        records = to_records(read_table(text))
    except SalesCsvError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    config = ViewConfig.from_params(region, currency, rates)
    return asdict(summarize(records, rates, config))


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/summary", response_model=SummaryResponse)
async def summary_upload(
    file: UploadFile = File(...),
    rates: Optional[UploadFile] = File(None),
    region: str = Query(default=ALL_REGIONS),
    currency: Optional[str] = Query(default=None),
):
    _require_csv(file)

    text, _ = decode_csv_bytes(await file.read())
    rate_table = parse_rate_json((await rates.read()).decode("utf-8-sig", errors="replace") if rates else None)
    return _summary(text, rate_table, region, currency)


@app.get("/summary", response_model=SummaryResponse)
def summary_configured(
    region: str = Query(default=ALL_REGIONS),
    currency: Optional[str] = Query(default=None),
):
    settings = load_settings()
    try:
        text = load_csv_text(settings.csv_source, settings.fetch_timeout)
    except SourceError as exc:
        logger.error("Failed to load data: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    rate_table = load_rate_table(settings.rates_source, settings.fetch_timeout)
    return _summary(text, rate_table, region, currency)


@app.post("/column-total", response_model=ColumnTotalResponse)
async def column_total(
    file: UploadFile = File(...),
    column: str = Query(default=DEFAULT_SUM_COLUMN),
):
    _require_csv(file)

    text, _ = decode_csv_bytes(await file.read())
    try:
        result = sum_column(read_table(text), column)
    except SalesCsvError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    payload = asdict(result)
    payload["total_formatted"] = format_amount(result.total)
    return payload

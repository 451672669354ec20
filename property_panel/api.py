from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import Field

load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env", override=False)

from .config import get_settings
from .models.panel import MAX_RENTAL_COMP_LIMIT, MAX_SALE_COMP_LIMIT, PanelOptions
from .models.property import AddressQuery
from .services.county_provider import CountyProvider
from .services.http import ProviderError
from .services.panel_service import PanelValidationError, build_property_panel
from .services.primary_provider import PrimaryProvider
from .utils.logging import get_logger

LOGGER = get_logger("api")

app = FastAPI(title="Property Panel")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in get_settings().cors_origins.split(",")],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)
router = APIRouter(prefix="/api")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    LOGGER.info("request method=%s path=%s origin=%s", request.method, request.url.path, request.headers.get("origin", "none"))
    return await call_next(request)


def _provider_failure(message: str, exc: ProviderError) -> JSONResponse:
    LOGGER.error("provider_failure provider=%s status=%s details=%s", exc.provider, exc.status, exc.details)
    return JSONResponse(status_code=exc.status or 502, content={"error": message, "details": exc.details})


@app.get("/")
def root():
    return {"message": "Property panel backend is running"}


@app.get("/ping")
def ping():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@router.get("/health")
def health(): return {"status": "ok"}


@router.get("/property")
def get_property(address: Optional[str] = Query(None)):
    if not address or not address.strip():
        raise HTTPException(400, detail="Address is required")
    try:
        return PrimaryProvider(get_settings()).raw_property(address)
    except ProviderError as exc:
        return _provider_failure("Failed to fetch property data", exc)


@router.get("/rent-comps")
def rent_comps(
    address: Optional[str] = Query(None),
    radius: float = Query(1.0, gt=0),
    limit: int = Query(10, ge=1, le=MAX_RENTAL_COMP_LIMIT),
    provider: Literal["primary", "county"] = Query("primary"),
):
    if not address or not address.strip():
        raise HTTPException(400, detail="Address is required")
    settings = get_settings()
    client = PrimaryProvider(settings) if provider == "primary" else CountyProvider(settings)
    try:
        result = client.rental_comps(address, radius=radius, limit=limit)
    except ProviderError as exc:
        return _provider_failure("Failed to fetch rental comps", exc)
    return jsonable_encoder(result)


@router.get("/sale-comps")
def sale_comps(
    state: Optional[str] = Query(None),
    county: Optional[str] = Query(None),
    limit: int = Query(10, ge=1, le=MAX_SALE_COMP_LIMIT),
    subject_sqft: Optional[float] = Query(None),
):
    if not state or not county:
        raise HTTPException(400, detail="state and county are required")
    result = CountyProvider(get_settings()).sale_comps(state, county, limit, subject_sqft)
    payload = jsonable_encoder(result.value) if result.value is not None else {"tier": "none", "count": 0, "comps": []}
    payload["warning"] = result.warning
    return payload


class PanelRequest(AddressQuery):
    options: PanelOptions = Field(default_factory=PanelOptions)


def _panel(query: AddressQuery, options: PanelOptions):
    try:
        panel = build_property_panel(query, options)
    except PanelValidationError as exc:
        raise HTTPException(400, detail=str(exc))
    except Exception as exc:
        LOGGER.exception("panel_failed error=%s", exc)
        return JSONResponse(status_code=500, content={"error": "Failed to build property panel", "message": str(exc)})
    return jsonable_encoder(panel)


@router.post("/property-panel")
def property_panel_post(req: PanelRequest):
    query = AddressQuery(**req.model_dump(exclude={"options"}))
    return _panel(query, req.options)


@router.get("/property-panel")
def property_panel_get(
    full_address: Optional[str] = Query(None, alias="address"),
    state: Optional[str] = Query(None),
    address_line1: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    county: Optional[str] = Query(None),
    cap_rate_percent: float = Query(8.0),
    vacancy_percent: float = Query(5.0),
    expense_percent: float = Query(35.0),
    down_payment_percent: float = Query(20.0),
    interest_rate_percent: float = Query(7.5),
    loan_years: int = Query(30),
    sale_comp_limit: int = Query(10),
    purchase_price: Optional[float] = Query(None),
):
    query = AddressQuery(full_address=full_address, state=state, address_line1=address_line1, city=city, county=county)
    options = PanelOptions(
        cap_rate_percent=cap_rate_percent,
        vacancy_percent=vacancy_percent,
        expense_percent=expense_percent,
        down_payment_percent=down_payment_percent,
        interest_rate_percent=interest_rate_percent,
        loan_years=loan_years,
        sale_comp_limit=sale_comp_limit,
        purchase_price_override=purchase_price,
    )
    return _panel(query, options)


app.include_router(router)

# main.py
from dotenv import load_dotenv
load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from medscan.container import get_catalog, get_history_recorder, get_identify_use_case, get_settings
from medscan.domain.errors import IdentificationError, ValidationError
from medscan.presentation.routers import router as v1_router
from medscan.presentation.schemas import ErrorResponse

settings = get_settings()

# --- logging config before anything logs ---
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
app_logger = logging.getLogger("medscan.request")

app = FastAPI(
    title="MedScan-Identify",
    version=settings.app_version,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    app_logger.info("Incoming %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        app_logger.info("Completed %s %s -> %s", request.method, request.url.path, response.status_code)
        return response
    except Exception:
        app_logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        raise

# ─────────────────────────────────────────────────────────────
# CORS (env: CORS_ALLOW_ORIGINS="https://foo.com,https://bar.com")
# ─────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials="*" not in settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ─────────────────────────────────────────────────────────────
# Errors → {"error", "message", "details", "suggestions"}
# A failed identification still offers catalog picks for manual search.
# ─────────────────────────────────────────────────────────────
def _suggestions(request: Request) -> list:
    if not request.url.path.startswith("/v1/identify"):
        return []
    provider = request.app.dependency_overrides.get(get_identify_use_case, get_identify_use_case)
    try:
        return [r.to_public() for r in provider().suggestions()]
    except Exception:
        app_logger.exception("could not build suggestions")
        return []


def _error_response(request: Request, exc: IdentificationError, details=None) -> JSONResponse:
    body = ErrorResponse(
        error=exc.code,
        message=exc.message,
        details=details if details is not None else exc.detail,
        suggestions=_suggestions(request),
    )
    return JSONResponse(status_code=exc.http_status, content=jsonable_encoder(body))


@app.exception_handler(IdentificationError)
async def identification_error_handler(request: Request, exc: IdentificationError):
    if exc.http_status >= 500:
        app_logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    else:
        app_logger.info("%s on %s: %s", exc.code, request.url.path, exc.message)
    return _error_response(request, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]
    return _error_response(request, ValidationError("Invalid request data"), details=details)

# ─────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────
app.include_router(v1_router, tags=["api"])

@app.get("/")
async def root():
    return {
        "name": "MedScan-Identify",
        "version": settings.app_version,
        "ok": True,
    }

@app.get("/healthz")
async def healthz():
    return {"ok": True}

@app.get("/readyz")
async def readyz():
    """
    Readiness:
    - catalog loaded and non-empty
    - history store reachable (mongo ping / in-memory)
    - recent-scans cache ping (if REDIS_URL set)
    - provider configured (only when ID_PROVIDER != mock)
    """
    checks = {}
    ok = True

    catalog = get_catalog()
    checks["catalog_size"] = len(catalog)
    ok = ok and len(catalog) > 0

    recorder = get_history_recorder()
    try:
        checks["history_store"] = bool(await recorder.store.ping())
    except Exception as e:
        checks["history_store"] = False
        checks["history_store_error"] = str(e)
    ok = ok and checks["history_store"]

    if recorder.recent is not None:
        try:
            checks["recent_cache"] = bool(await recorder.recent.ping())
        except Exception as e:
            checks["recent_cache"] = False
            checks["recent_cache_error"] = str(e)
        ok = ok and checks["recent_cache"]

    uc = get_identify_use_case()
    checks["provider_mode"] = uc.provider_mode
    if uc.provider_mode:
        missing = uc.provider.missing_settings() if uc.provider else ["provider"]
        checks["provider_configured"] = not missing
        ok = ok and not missing

    return {"ok": ok, **checks}

# ─────────────────────────────────────────────────────────────
# Startup: build catalog + history indexes so first hit is fast
# ─────────────────────────────────────────────────────────────
@app.on_event("startup")
async def warmup():
    get_catalog()
    store = get_history_recorder().store
    if hasattr(store, "ensure_indexes"):
        try:
            await store.ensure_indexes()
        except Exception as e:
            app_logger.warning("history index creation failed: %s", e)

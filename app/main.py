from fastapi import FastAPI, Request, Depends, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
import redis
from pathlib import Path
from contextlib import asynccontextmanager
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from core.config import settings
from core.database import get_db
from core import redis_service

from routes.auth import router as auth_router
from routes.users import router as users_router
from routes.addresses import router as addresses_router
from routes.products import router as products_router
from routes.uploads import router as uploads_router
from routes.site_settings import router as site_settings_router
from routes.contact import router as contact_router
from routes.carts import router as carts_router
from routes.orders import router as orders_router
from routes.admin_orders import router as admin_orders_router
from routes.payments import router as payments_router

# Plánované úlohy
from core.tasks import start_scheduler, stop_scheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Firebase Admin SDK (přihlášení přes Google)
from core.firebase_service import firebase_service
firebase_service.initialize()

# Platby kartou
from core.payment_service import payment_service

def initialize_payment_service():
    """
    Zapnout Stripe, pokud je nastavený API klíč. Bez klíče platba kartou vrací 503.
    """
    if not settings.STRIPE_API_KEY:
        logger.info("Stripe není nakonfigurován, platby kartou jsou vypnuté")
        return

    payment_service.initialize(
        provider_name="stripe",
        api_key=settings.STRIPE_API_KEY,
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET
    )

initialize_payment_service()

is_development = settings.ENV == "development"
docs_url = "/docs" if is_development else None
redoc_url = "/redoc" if is_development else None
openapi_url = "/openapi.json" if is_development else None

# ==================== LIFESPAN ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Start a ukončení aplikace (plánovač úloh).
    """
    start_scheduler()
    yield
    stop_scheduler()

app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    docs_url=docs_url,
    redoc_url=redoc_url,
    openapi_url=openapi_url,
    redirect_slashes=False,  # bez 307 přesměrování
    lifespan=lifespan
)

# allow_credentials=True je nutné kvůli HttpOnly cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "X-CSRF-Token", "X-Cart-Id"],
)

# ==================== CSRF ====================
# Jen pro frontend přihlášený přes cookies; Bearer požadavky se nekontrolují
if settings.CSRF_PROTECTION_ENABLED:
    from core.csrf_protection import CSRFMiddleware
    app.add_middleware(CSRFMiddleware)

# ==================== EXCEPTION HANDLERS ====================

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Chyby validace Pydantic ve standardním formátu odpovědi (400).
    """
    errors = exc.errors()

    error_messages = []
    validation_errors = []

    for error in errors:
        field = " -> ".join(str(loc) for loc in error["loc"][1:]) or str(error["loc"][0])
        msg = error["msg"]
        error_type = error["type"]
        ctx = error.get("ctx") or {}

        if error_type == "string_too_short":
            error_messages.append(f"Pole '{field}' musí mít alespoň {ctx.get('min_length', '')} znaků")
        elif error_type == "string_too_long":
            error_messages.append(f"Pole '{field}' může mít nejvýše {ctx.get('max_length', '')} znaků")
        elif error_type == "missing":
            error_messages.append(f"Pole '{field}' je povinné")
        elif error_type == "value_error":
            # Vlastní zpráva z validátoru
            if "error" in ctx:
                error_messages.append(str(ctx["error"]))
            else:
                error_messages.append(f"Pole '{field}' má neplatnou hodnotu")
        elif error_type.startswith("greater_than"):
            limit = ctx.get("gt", ctx.get("ge", ""))
            error_messages.append(f"Pole '{field}' musí být alespoň {limit}")
        elif error_type.startswith("less_than"):
            limit = ctx.get("lt", ctx.get("le", ""))
            error_messages.append(f"Pole '{field}' může být nejvýše {limit}")
        elif error_type == "enum":
            error_messages.append(f"Pole '{field}' musí být jedna z hodnot: {ctx.get('expected', '')}")
        elif error_type == "string_pattern_mismatch":
            error_messages.append(f"Pole '{field}' má neplatný formát")
        elif "email" in msg.lower():
            error_messages.append(f"Pole '{field}' musí být platný email")
        else:
            error_messages.append(f"Pole '{field}': {msg}")

        validation_errors.append({
            "field": field,
            "message": error_messages[-1],
            "type": error_type
        })

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "status_code": 400,
            "message": error_messages[0] if error_messages else "Neplatná data",
            "error": "VALIDATION_ERROR",
            "details": validation_errors
        }
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Neošetřená chyba při %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "status_code": 500,
            "message": "Na serveru došlo k chybě. Zkuste to prosím později.",
            "error": "INTERNAL_SERVER_ERROR"
        }
    )

# Registrace routerů
app.include_router(auth_router)
app.include_router(users_router)
app.include_router(addresses_router)
app.include_router(products_router)
app.include_router(uploads_router)
app.include_router(site_settings_router)
app.include_router(contact_router)
app.include_router(carts_router)
app.include_router(orders_router)
app.include_router(admin_orders_router)
app.include_router(payments_router)

# Nahrané obrázky; mount až za routery, aby nezachytil API cesty
uploads_path = Path(settings.UPLOAD_DIR)
uploads_path.mkdir(parents=True, exist_ok=True)
app.mount("/static", StaticFiles(directory=str(uploads_path)), name="static")

@app.get("/")
async def root():
    return {
        "message": "Vítejte v API Pekařství Bánov",
        "version": settings.API_VERSION,
        "docs": docs_url
    }

@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """Stav databáze a Redisu."""
    checks = {}

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        logger.error("Health check databáze selhal: %s", e)
        checks["database"] = "error"

    try:
        redis_service.redis_client.ping()
        checks["redis"] = "ok"
    except redis.RedisError as e:
        logger.error("Health check Redisu selhal: %s", e)
        checks["redis"] = "error"

    healthy = all(value == "ok" for value in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "checks": checks
        }
    )

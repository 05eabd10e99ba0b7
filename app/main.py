import json
import logging
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.db.session import engine
from app.api.v1.router import api_router
from app.core.errors import register_error_handlers
from app.core.rate_limit import rate_limit_middleware

APP_VERSION = "0.1.0"


# ── JSON Structured Logging ──────────────────────────────────


class JSONFormatter(logging.Formatter):
    """Outputs log records as single-line JSON for production log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        audit_data = getattr(record, "audit_data", None)
        if audit_data:
            log["audit"] = audit_data
        if record.exc_info and record.exc_info[0]:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging():
    """Configure structured JSON logging for production."""
    settings = get_settings()

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if settings.debug:
        handler.setFormatter(logging.Formatter(
            "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    else:
        handler.setFormatter(JSONFormatter())

    root.handlers = [handler]

    # Reduce noise from third-party libraries
    for name in ("httpx", "httpcore", "openai", "uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(name).setLevel(logging.WARNING)


logger = logging.getLogger("cleverkit")


# ── Lifespan ─────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    from app.core.metrics import APP_INFO
    settings = get_settings()
    APP_INFO.info({"version": APP_VERSION, "name": settings.app_name})
    logger.info("%s API starting up (analysis dispatch: %s)", settings.app_name, settings.analysis_dispatch)
    yield
    logger.info("%s API shutting down", settings.app_name)
    await engine.dispose()


# ── App Factory ──────────────────────────────────────────────


def _metrics_path(path: str) -> str:
    # Collapse UUID segments for label cardinality
    if "/api/v1/" not in path:
        return path
    return "/".join("<id>" if len(p) > 20 and "-" in p else p for p in path.split("/"))


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "## The Clever Kit: brand intelligence from a homepage\n\n"
            "- **Analyze**: scrape a brand's homepage and run the basics, customer and "
            "products analyzers in parallel\n"
            "- **Track**: poll `/brands/{id}/analysis` or subscribe to `/ws/analysis`\n"
            "- **Generate**: turn completed analysis into strategy documents "
            "once the readiness gate passes\n"
            "- **Export**: push a generated document to Google Docs\n\n"
            "### Authentication\n"
            "All endpoints (except `/auth/register` and `/auth/login`) require a "
            "Bearer JWT token in the `Authorization` header.\n\n"
            "### Rate Limits\n"
            "| Endpoint | Limit |\n"
            "|----------|-------|\n"
            "| `/auth/login` | 10 req/min |\n"
            "| `/auth/register` | 3 req/min |\n"
            "| `/brands/analyze`, `/docs/generate`, `/export/google-docs` | 10 req/min |\n"
            "| General API | 120 req/min |\n"
        ),
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {"name": "auth", "description": "User registration, login, JWT token management"},
            {"name": "brands", "description": "Brand analysis, progress polling, readiness"},
            {"name": "docs", "description": "Document templates, generation, and state"},
            {"name": "export", "description": "Export generated documents to Google Docs"},
            {"name": "integrations", "description": "Google account connection via OAuth"},
            {"name": "websocket", "description": "Real-time analysis run updates"},
        ],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "X-Requested-With"],
    )

    app.middleware("http")(rate_limit_middleware)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["X-Permitted-Cross-Domain-Policies"] = "none"
        if "server" in response.headers:
            del response.headers["server"]
        return response

    @app.middleware("http")
    async def timing_middleware(request: Request, call_next):
        from app.core.metrics import HTTP_REQUESTS, HTTP_REQUEST_DURATION

        start = time.monotonic()
        response: Response = await call_next(request)
        duration = time.monotonic() - start

        path = _metrics_path(request.url.path)
        HTTP_REQUESTS.labels(
            method=request.method,
            path=path,
            status_code=str(response.status_code),
        ).inc()
        HTTP_REQUEST_DURATION.labels(method=request.method, path=path).observe(duration)
        return response

    # Added last so the catch-all middleware is outermost.
    register_error_handlers(app)

    app.include_router(api_router, prefix="/api/v1")

    # ── Prometheus metrics endpoint ──────────────────────────

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # ── Health check ─────────────────────────────────────────

    @app.get("/health")
    async def health():
        from sqlalchemy import text
        from app.core.circuit_breaker import get_all_breakers

        checks = {"status": "ok", "version": APP_VERSION}
        overall_ok = True

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = "ok"
        except Exception as e:
            checks["database"] = f"error: {e}"
            overall_ok = False

        # Redis only backs the Celery dispatch mode
        if settings.analysis_dispatch == "celery":
            try:
                import redis.asyncio as aioredis
                r = aioredis.from_url(settings.redis_url)
                await r.ping()
                await r.aclose()
                checks["redis"] = "ok"
            except Exception as e:
                checks["redis"] = f"error: {e}"
                overall_ok = False
        else:
            checks["redis"] = "not used"

        breakers = {}
        for cb in get_all_breakers():
            breakers[cb.name] = cb.state.value
            if cb.is_open:
                overall_ok = False
        checks["circuit_breakers"] = breakers

        checks["status"] = "ok" if overall_ok else "degraded"
        return checks

    return app


app = create_app()

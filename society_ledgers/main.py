import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from society_ledgers.core.config import settings
from society_ledgers.core.exceptions import LedgerError
from society_ledgers.core.logging import configure_logging
from society_ledgers.db.bootstrap import ensure_admin
from society_ledgers.db.mongo import connect_to_mongo, disconnect_from_mongo, get_db
from society_ledgers.routes import (
    advance_payments,
    agents,
    auth,
    bills,
    invitations,
    reports,
    societies,
    uploads,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()
    await ensure_admin(get_db())
    yield
    await disconnect_from_mongo()


async def ledger_error_handler(request: Request, exc: LedgerError):
    if exc.status_code >= 500:
        logger.error("Request failed", extra={"path": request.url.path, "detail": exc.detail})
    body = {"detail": exc.detail}
    if exc.errors:
        body["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=body)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request", "errors": errors},
    )


def create_app() -> FastAPI:
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        description=settings.DESCRIPTION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    @app.get("/health")
    async def health():
        return {"ok": True}

    app.include_router(auth.router)
    app.include_router(agents.router)
    app.include_router(societies.router)
    app.include_router(invitations.router)
    app.include_router(bills.router)
    app.include_router(advance_payments.router)
    app.include_router(reports.router)
    app.include_router(uploads.router)

    app.mount(
        settings.UPLOAD_URL_PREFIX,
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="files",
    )
    return app


app = create_app()

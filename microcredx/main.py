from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from contextlib import asynccontextmanager
from typing import Optional
import logging
import traceback

from microcredx.api.application_routes import router as application_router
from microcredx.api.loan_catalog_routes import router as loan_catalog_router
from microcredx.api.user_routes import router as user_router
from microcredx.core.config import settings
from microcredx.core.exceptions import ServiceError
from microcredx.database.connection import Database
from microcredx.services import ApplicationLedgerService, LoanCatalogService, UserDirectoryService

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("server_exception_handler")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds the standard hardening headers to every non-preflight response.

    OPTIONS requests are left to CORSMiddleware so preflights keep their
    Access-Control-* headers.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        if request.method != "OPTIONS":
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A failed connection propagates and aborts startup
    await app.state.database.connect()
    yield
    app.state.database.close()


async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"HTTPException handled: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)}, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error: {exc.errors()}")
    body = {
        "message": "Request validation failed",
        "details": jsonable_errors(exc),
    }
    return JSONResponse(status_code=422, content=body)


def jsonable_errors(exc: RequestValidationError):
    # ctx may carry exception instances that are not JSON serialisable
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


async def generic_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exc()
    logger.error(f"Unhandled exception: {str(exc)}\n{tb}")
    return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


def create_app(database: Optional[Database] = None, home_loans_limit: Optional[int] = settings.HOME_LOANS_LIMIT) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Loan catalog, user directory and loan application ledger for the MicroCredX marketplace",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.database = database or Database(uri=settings.MONGODB_URI, db_name=settings.MONGODB_DB_NAME)
    app.state.catalog_service = LoanCatalogService(home_limit=home_loans_limit)
    app.state.application_service = ApplicationLedgerService()
    app.state.user_service = UserDirectoryService(ledger=app.state.application_service)

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # CLIENT_URL is comma-separated; "*" opens the API to any origin
    raw_origins = settings.CLIENT_URL or "*"
    allowed_origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
    allow_any = "*" in allowed_origins

    # Middleware runs LIFO: CORS is added last so it sees preflights first
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_any else allowed_origins,
        allow_credentials=not allow_any,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin", "X-Requested-With"],
    )

    app.include_router(loan_catalog_router)
    app.include_router(user_router)
    app.include_router(application_router)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "server is running.."

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "message": "API is running"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("microcredx.main:app", host=settings.HOST, port=settings.PORT)

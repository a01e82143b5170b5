"""FastAPI application entrypoint for Campus Points."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api.v1.router import api_router
from .core.logging import configure_logging
from .jobs import register_scheduler
from .services.exceptions import LedgerError


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""
    configure_logging()
    app = FastAPI(title="Campus Points API", version="0.1.0")
    app.include_router(api_router, prefix="/api/v1")

    @app.exception_handler(LedgerError)
    async def handle_ledger_error(_: Request, exc: LedgerError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    register_scheduler(app)
    return app


app = create_app()

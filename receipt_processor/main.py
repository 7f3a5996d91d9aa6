from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings
from .ids import IdGenerationError
from .routes.receipts import router as receipts_router
from .store import ReceiptStore
from .utils.logging import logger


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "invalid receipt"


def create_app(store: ReceiptStore | None = None) -> FastAPI:
    """
    Builds the service. Pass a store to share or inspect it (tests);
    otherwise each app gets a fresh one on startup.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Server started on port %s", settings.PORT)
        yield

    docs = settings.EXPOSE_DOCS
    app = FastAPI(title="Receipt Processor",
                  description="Scores receipts and looks up their points",
        version="0.1.0",
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        redirect_slashes=False,
        lifespan=lifespan)

    app.state.store = store if store is not None else ReceiptStore()
    app.include_router(receipts_router)

    @app.exception_handler(RequestValidationError)
    async def bad_receipt(request: Request, exc: RequestValidationError):
        return PlainTextResponse(_validation_message(exc), status_code=400)

    @app.exception_handler(IdGenerationError)
    async def id_failure(request: Request, exc: IdGenerationError):
        logger.error("Receipt id generation failed: %s", exc, exc_info=exc)
        return PlainTextResponse(str(exc), status_code=500)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return PlainTextResponse("Not found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code,
                                 headers=getattr(exc, "headers", None))

    return app


app = create_app()


def run():
    uvicorn.run(app, host=settings.HOST, port=settings.PORT,
                log_level=settings.LOG_LEVEL.lower())

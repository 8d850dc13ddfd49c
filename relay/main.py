import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from relay.config import Settings, settings as default_settings
from relay.core.errors import RelayError
from relay.core.responses import err
from relay.routes import transfer
from relay.services.context import build_context
from relay.services.endpoints import build_web3

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, web3_factory=build_web3) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctx = build_context(settings, web3_factory=web3_factory)
        app.state.context = ctx
        try:
            await ctx.pool.ensure_connected()
        except RelayError as exc:
            # the pool retries lazily on the first request
            logger.warning("Starting without a live endpoint: %s", exc.message)
        if not ctx.account.configured:
            logger.warning("TREASURY_PRIVATE_KEY not set; transfers are disabled")
        yield

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )
    app.include_router(transfer.router)

    # Browser wallets call the relay directly
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        messages = "; ".join(e.get("msg", "invalid") for e in exc.errors())
        return err(messages or "Invalid request", 400, code="bad_request")

    return app


app = create_app()

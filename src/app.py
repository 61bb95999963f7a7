"""Storefront FastAPI application.

Serves the cart, checkout and order endpoints. Each request runs inside the
storefront domain context and gets its own session Storefront; the shared
services are built lazily from ``STOREFRONT_*`` settings on the first request
unless they are passed to ``create_app``.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api import cart_router, checkout_router, install_error_handlers, order_router
from storefront.config import get_settings
from storefront.domain import storefront
from storefront.session import StorefrontServices, init_domain
from storefront.utils.logging import configure_logging

# The domain is initialized at module level so uvicorn workers share it.
init_domain()


def create_app(services: StorefrontServices | None = None) -> FastAPI:
    app = FastAPI(
        title="Storefront API",
        description="Cart and order submission for digital in-game goods",
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context for each request."""
        with storefront.domain_context():
            response = await call_next(request)
        return response

    install_error_handlers(app)

    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(order_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok"})

    return app


settings = get_settings()
configure_logging(settings.env, log_dir=settings.log_dir)

app = create_app()

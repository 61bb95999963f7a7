"""Storefront API package."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError

from storefront.api.routes import cart_router, checkout_router, order_router
from storefront.exceptions import AuthenticationRequired, SessionRequired


def install_error_handlers(app: FastAPI) -> None:
    """Map storefront errors raised inside routes to HTTP responses."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"errors": dict(exc.messages)})

    @app.exception_handler(SessionRequired)
    async def session_required_handler(request: Request, exc: SessionRequired) -> JSONResponse:
        return JSONResponse(status_code=400, content={"errors": exc.messages})

    @app.exception_handler(AuthenticationRequired)
    async def authentication_required_handler(request: Request, exc: AuthenticationRequired) -> JSONResponse:
        return JSONResponse(status_code=401, content={"errors": exc.messages})


__all__ = ["cart_router", "checkout_router", "order_router", "install_error_handlers"]

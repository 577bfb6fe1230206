"""Thin HTTP endpoint for minting and burning the configured token."""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

from network.exceptions import SubmitError
from txbuilder.exceptions import BuildError
from txbuilder.service import MintingService

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8088


def create_app(service: MintingService) -> FastAPI:
    """
    Create the FastAPI application around a minting service.

    Successful requests answer 200 with the transaction id as plain text;
    build and submission failures answer 400 with the error message.
    """
    app = FastAPI(
        title="Token Minter",
        description="Admin-controlled minting of a single token",
    )

    @app.exception_handler(BuildError)
    async def _build_error(request: Request, exc: BuildError):
        logger.warning(f"{request.method} {request.url.path} failed to build: {exc}")
        return PlainTextResponse(str(exc), status_code=400)

    @app.exception_handler(SubmitError)
    async def _submit_error(request: Request, exc: SubmitError):
        logger.warning(f"{request.method} {request.url.path} failed to submit: {exc}")
        return PlainTextResponse(str(exc), status_code=400)

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError):
        messages = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
        return PlainTextResponse(messages, status_code=400)

    @app.put("/mint", response_class=PlainTextResponse)
    def mint(amount: int = Query(..., description="Units to mint")) -> str:
        return service.submit_minting_tx(amount)

    @app.put("/burn", response_class=PlainTextResponse)
    def burn(amount: int = Query(..., description="Units to burn")) -> str:
        return service.submit_burning_tx(amount)

    @app.get("/policy")
    def policy() -> Dict[str, Any]:
        return service.policy_info()

    return app

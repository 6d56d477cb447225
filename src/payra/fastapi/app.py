"""
FastAPI application exposing the Payra merchant operations
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from payra.abi import AbiRegistry
from payra.config import PayraConfig
from payra.exceptions import PayraError
from payra.logging_config import get_logger
from payra.services import OrderService
from payra.signers import SignatureGenerator
from payra.types import OrderQueryRequest, SignatureRequest, UtilsRequest
from payra.utils import ExchangeRateClient, from_wei, get_token_decimals, to_wei

logger = get_logger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


def create_app(
    config: PayraConfig | None = None,
    order_service: OrderService | None = None,
    signature_generator: SignatureGenerator | None = None,
    exchange_client: ExchangeRateClient | None = None,
    registry: AbiRegistry | None = None,
) -> FastAPI:
    """
    Build the HTTP application.

    Handlers are synchronous so FastAPI runs the blocking RPC wait in its
    threadpool. Collaborators default to ones built from ``config``, which
    itself defaults to ``PayraConfig.from_env()``. The contract ABI is loaded
    once here, from ``config.abi_file`` when set.

    Usage:
        app = create_app(PayraConfig.from_env(dotenv_path=".env"))
        # uvicorn module:app
    """
    config = config or PayraConfig.from_env()
    registry = registry or AbiRegistry.load(config.abi_file)
    order_service = order_service or OrderService(config, registry=registry)
    signature_generator = signature_generator or SignatureGenerator(config)
    exchange_client = exchange_client or ExchangeRateClient.from_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        order_service.close()

    app = FastAPI(title="Payra merchant API", lifespan=lifespan)

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if errors and errors[0].get("type") != "json_invalid" and len(errors[0].get("loc", ())) > 1:
            field = ".".join(str(p) for p in errors[0]["loc"][1:])
            return _error(400, f"Missing or invalid parameter: '{field}'.")
        return _error(400, "Invalid JSON input.")

    @app.post("/api/signature")
    def generate_signature(body: SignatureRequest) -> Any:
        try:
            signature = signature_generator.generate_signature(
                network=body.network,
                token_address=body.token_address,
                order_id=body.order_id,
                amount_wei=body.amount,
                timestamp=body.timestamp,
                payer_address=body.payer_address,
            )
        except PayraError as e:
            return _error(500, str(e))
        return {
            "status": "success",
            "signature": signature,
            "message": "Signature generated successfully.",
        }

    @app.post("/api/order/details")
    def order_details(body: OrderQueryRequest) -> Any:
        result = order_service.get_order_details(body.network, body.order_id)
        return {"result": result.model_dump()}

    @app.post("/api/order/paid")
    def order_paid(body: OrderQueryRequest) -> Any:
        result = order_service.is_order_paid(body.network, body.order_id)
        return {"result": result.model_dump()}

    @app.post("/api/utils")
    def utils(body: UtilsRequest) -> Any:
        try:
            return {
                "convert": exchange_client.convert_to_usd(
                    body.amount_to_convert, body.currency_to_convert
                ),
                "token_decimals": get_token_decimals(body.network, body.decimals_token, config),
                "amount_wei": to_wei(body.amount_to_wei, body.network, body.currency_to_wei, config),
                "from_wei": from_wei(
                    body.amount_in_wei, body.network, body.currency_from_wei_to, config=config
                ),
            }
        except (PayraError, ValueError) as e:
            logger.error("Utils request failed: %s", e)
            return _error(500, "Internal server error.")

    return app

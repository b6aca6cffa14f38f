"""
FastAPI server — faucet request, health and stats endpoints plus the SPA.

POST /api/faucet is throttled per client IP (slowapi) ahead of the
per-address cooldown enforced by DisbursementService. GET /api/health and
GET /api/stats are read-only and not rate limited. Any other /api/* path is a
JSON 404; every other GET serves the built frontend from FAUCET_STATIC_DIR.
"""

import functools
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel, Field

from sepolia_faucet.api_server.middleware import IP_RATE_LIMIT, install_middleware, limiter
from sepolia_faucet.chain.client import ChainClient, format_units
from sepolia_faucet.config.env import get_cors_origins, get_static_dir, mask_rpc_url
from sepolia_faucet.config.settings import get_settings
from sepolia_faucet.core.exceptions import ConfigError, FaucetError
from sepolia_faucet.faucet.cooldown import describe_window
from sepolia_faucet.faucet.service import DisbursementService
from sepolia_faucet.faucet_logging import get_logger

logger = get_logger(__name__)

STATIC_DIR = get_static_dir()
CORS_ORIGINS = get_cors_origins()


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------

@functools.lru_cache(maxsize=1)
def get_chain_client() -> ChainClient:
    """Dependency: one web3 client for the faucet account (app-scoped)."""
    settings = get_settings()
    return ChainClient.from_rpc_url(
        settings.rpc_url,
        settings.private_key,
        timeout_sec=settings.rpc_timeout_sec,
    )


@functools.lru_cache(maxsize=1)
def get_faucet_service() -> DisbursementService:
    """Dependency: shared service so every request sees the same cooldown map."""
    return DisbursementService.from_settings(get_settings(), get_chain_client())


# -----------------------------------------------------------------------------
# Request / response models
# -----------------------------------------------------------------------------

class FaucetRequest(BaseModel):
    """POST /api/faucet body."""

    address: str | None = Field(None, description="Recipient address (0x + 40 hex)")


class FaucetResponse(BaseModel):
    success: bool = True
    txHash: str
    amount: str = Field(..., description="ETH sent, e.g. \"0.1\"")
    blockNumber: int | None = None


# -----------------------------------------------------------------------------
# Lifespan: validate config before serving traffic
# -----------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the chain client and service eagerly; a bad PRIVATE_KEY aborts startup."""
    try:
        settings = get_settings()
        service = get_faucet_service()
    except ConfigError as e:
        logger.error("startup_config_error", message=str(e))
        raise
    logger.info(
        "faucet_ready",
        faucet_address=service.chain.address,
        rpc_url=mask_rpc_url(settings.rpc_url),
        amount=format_units(service.amount_wei),
        cooldown_sec=service.cooldowns.window_sec,
    )
    yield
    logger.info("faucet_shutdown")


# -----------------------------------------------------------------------------
# App and routes
# -----------------------------------------------------------------------------

app = FastAPI(
    title="Sepolia Faucet API",
    description="Testnet ETH faucet: fixed-amount transfers with per-address and per-IP cooldowns.",
    version="0.1.0",
    lifespan=lifespan,
)
install_middleware(app, CORS_ORIGINS)


@app.post("/api/faucet", response_model=FaucetResponse, response_model_exclude_none=True)
@limiter.limit(IP_RATE_LIMIT)
def request_funds(
    request: Request,
    body: FaucetRequest | None = None,
    service: DisbursementService = Depends(get_faucet_service),
) -> dict[str, Any]:
    """
    Send the fixed faucet amount to body.address.

    Error statuses: 400 bad/missing address or recipient already funded,
    429 cooldown, 503 reserve low, 502 network, 500 anything else.
    """
    address = body.address.strip() if body and body.address else None
    try:
        result = service.disburse(address)
    except FaucetError as e:
        if e.status_code >= 500:
            logger.error("faucet_request_failed", address=address, status=e.status_code, error=str(e))
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    except Exception as e:
        logger.exception("faucet_request_failed", address=address, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error") from e
    return result.to_response()


@app.get("/api/health")
def health(chain: ChainClient = Depends(get_chain_client)) -> JSONResponse:
    """Reserve balance, faucet address and network; 500 if the node is unreachable."""
    try:
        balance = chain.get_balance(chain.address)
        network = chain.get_network()
    except Exception as e:
        logger.warning("health_check_failed", error=str(e))
        return JSONResponse(status_code=500, content={"status": "unhealthy", "error": str(e)})
    return JSONResponse(
        content={
            "status": "healthy",
            "faucetAddress": chain.address,
            "balance": format_units(balance),
            "network": network.name,
            "chainId": str(network.chain_id),
        }
    )


@app.get("/api/stats")
def stats(
    chain: ChainClient = Depends(get_chain_client),
    service: DisbursementService = Depends(get_faucet_service),
) -> dict[str, str]:
    """Reserve balance, amount per request, current gas price (gwei) and cooldown."""
    try:
        balance = chain.get_balance(chain.address)
        gas_price = chain.get_gas_price()
    except Exception as e:
        logger.exception("stats_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error") from e
    return {
        "faucetBalance": format_units(balance),
        "faucetAddress": chain.address,
        "amountPerRequest": format_units(service.amount_wei),
        "gasPrice": format_units(gas_price, "gwei"),
        "cooldownPeriod": describe_window(service.cooldowns.window_sec),
    }


# -----------------------------------------------------------------------------
# Fallthrough: unknown API paths and the static frontend
# -----------------------------------------------------------------------------

@app.api_route(
    "/api/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
def api_not_found(path: str) -> None:
    raise HTTPException(status_code=404, detail="API endpoint not found")


@app.get("/{path:path}", include_in_schema=False)
def frontend(path: str) -> FileResponse:
    """Serve a file from the frontend build, falling back to index.html for client-side routes."""
    root = STATIC_DIR.resolve()
    if path:
        candidate = (root / path).resolve()
        if candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
    index = root / "index.html"
    if index.is_file():
        return FileResponse(index)
    raise HTTPException(status_code=404, detail="Not found")

"""
Main entrypoint: validate configuration, then run the FastAPI server.

Configuration errors (missing or malformed PRIVATE_KEY, bad numeric env) are
fatal: they are logged and the process exits before binding the port.

Env: SEPOLIA_RPC_URL, PRIVATE_KEY, HOST, PORT, FAUCET_* and LOG_* (see .env.example).

Server only: uvicorn sepolia_faucet.api_server.app:app --host 0.0.0.0 --port 3001
"""

import logging
import sys

# Configure structured JSON logging before other imports that may log
from sepolia_faucet.faucet_logging import get_logger
from sepolia_faucet.faucet_logging.logger import LOG_LEVEL_VALUE

logger = get_logger("main")


def uvicorn_log_level() -> str:
    """uvicorn's name for LOG_LEVEL ("WARN" -> "warning"; unknown values fall back to info)."""
    return logging.getLevelName(LOG_LEVEL_VALUE).lower()


def main() -> None:
    """Load settings, build the faucet account, then serve."""
    from sepolia_faucet.config.env import mask_rpc_url
    from sepolia_faucet.config.settings import get_settings
    from sepolia_faucet.core.exceptions import ConfigError

    try:
        settings = get_settings()
    except ConfigError as e:
        logger.error("main_config_error", message=str(e))
        sys.exit(1)

    from sepolia_faucet.api_server.app import app
    from sepolia_faucet.api_server.server import get_chain_client
    import uvicorn

    logger.info(
        "main_server_starting",
        host=settings.host,
        port=settings.port,
        faucet_address=get_chain_client().address,
        rpc_url=mask_rpc_url(settings.rpc_url),
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=uvicorn_log_level())


if __name__ == "__main__":
    main()

"""
FastAPI/ASGI application entrypoint.

Build and configure the ASGI app; mount routes from server.
Run with: uvicorn sepolia_faucet.api_server.app:app --host 0.0.0.0 --port 3001
"""

from sepolia_faucet.api_server.server import app

__all__ = ["app"]

"""
API server package — HTTP/REST interface.

Exposes the faucet request endpoint with per-IP rate limiting, read-only
health and stats endpoints, and the static frontend. Delegates disbursement
to the faucet service and chain reads to the chain client.
"""

"""
JSSDK Service package for the JSSDK Access Layer.

This package signs JS-SDK configuration payloads for browser clients. The
signature needs a short-lived ticket, which itself needs a short-lived
access token; both are refreshed transparently.

- app.main: FastAPI application exposing the signing route.
- app.jssdk: Facade that wires the engine and builds request handlers.
- app.credentials: Credential records and the refresh/caching engine.
- app.persistence: Memory, file and Redis backends for credential records.
- app.issuer: HTTP client for the remote credential issuer.
- app.signing: Signature computation and the signing result model.

Design notes:
- Module import must not perform network or file IO. Redis connections
  are opened from explicit startup hooks.
- Each engine instance owns its own credential records; nothing is shared
  at module level.
"""

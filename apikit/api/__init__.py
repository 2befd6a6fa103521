"""HTTP API layer built on FastAPI.

Key components:
- **main**: Application factory and lifecycle management
- **middleware**: Cross-cutting concerns for all requests
  - Error handler chain producing error envelopes
  - Security headers and CORS
  - Rate limiting per client address
  - Request context with correlation ID tracking
  - Structured request logging with timing
- **routes**: Diagnostic endpoints
- **schemas**: Envelope and payload models (also used for OpenAPI docs)
- **utils**: Envelope builders and orjson serialization
- **validation**: Request validation dependency factory
"""

"""ApiKit - starter HTTP API service built on FastAPI.

Architecture Overview:
- **API Layer**: FastAPI application, middleware, routes and response envelopes
- **Core Layer**: Configuration, logging, request context and the error model
- **Services**: Application services used by the routes

Every response is a JSON envelope with a stable ``success`` flag and
``message``; errors carry a machine-readable code and optional details, and
stack traces are exposed only in development.
"""

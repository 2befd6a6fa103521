"""API routers.

- **server**: Diagnostic endpoints (ping, health, status, test-fail)
"""

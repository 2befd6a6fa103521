"""Application services used by the API layer.

- **server_diagnostics**: Ping, health and status data for the diagnostic
  endpoints
"""

"""Utility modules for API-specific functionality.

- **responses**: Envelope builders and the orjson response class
"""

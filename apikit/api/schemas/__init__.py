"""Pydantic schema models for API responses.

- **envelopes**: Success and error response envelopes
- **server**: Payloads of the diagnostic endpoints
"""

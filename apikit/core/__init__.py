"""Core package for shared application functionality.

- **config**: Settings and the runtime mode
- **context**: Request context and correlation ID management
- **error_kinds**: Default error fields keyed by HTTP status
- **exceptions**: ApiError hierarchy with error codes
- **logging**: Structured logging with Loguru
- **types**: Type aliases for better code clarity
"""

"""Middleware for cross-cutting request/response concerns.

- **ErrorHandlerMiddleware**: Runs the error handler chain on raised exceptions
- **SecurityHeadersMiddleware**: Adds security headers (HSTS, CSP, etc.)
- **CORS**: Cross-origin policy
- **Rate limiting**: slowapi limiter keyed by client address
- **RequestContextMiddleware**: Manages correlation IDs and request context
- **RequestLoggingMiddleware**: Structured logging with performance tracking

Processing order of a request, outermost first:
1. Security headers
2. CORS
3. Request context (sets up correlation IDs)
4. Request logging (logs with correlation context)
5. Rate limiting
6. Error handling (turns raised exceptions into error envelopes)
"""

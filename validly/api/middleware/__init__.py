"""API middleware."""

from validly.api.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]

from booking_analytics.middleware.request_log import RequestLoggingMiddleware  # noqa: F401
from booking_analytics.middleware.security import SecurityHeadersMiddleware  # noqa: F401

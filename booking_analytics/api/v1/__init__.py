from booking_analytics.api.v1.routes import api_router, health_router  # noqa: F401

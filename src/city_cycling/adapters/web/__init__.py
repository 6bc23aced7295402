"""Web adapter: Starlette application, result caches and middleware."""

from city_cycling.adapters.web.app import create_app

__all__ = ["create_app"]

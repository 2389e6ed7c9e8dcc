"""
Lumen API package.

Provides the FastAPI application for the Lumen chat assistant service.
The application instance lives in api.app.
"""

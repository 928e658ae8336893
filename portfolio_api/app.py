"""ASGI entry point: ``uvicorn portfolio_api.app:app``."""
from portfolio_api.app_factory import create_app

app = create_app()

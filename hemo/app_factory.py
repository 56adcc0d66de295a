"""Entry point for uvicorn/gunicorn: ``uvicorn hemo.app_factory:app``."""
from hemo.app import create_app

app = create_app()

__all__ = ["app", "create_app"]

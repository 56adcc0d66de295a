"""
FastAPI routers grouped by domain (users, health).

Each module exposes an APIRouter included by ``hemo.app.create_app``.
"""

"""
FastAPI routers grouped by area (auth, cards, admin, share, slug).

Each module exposes an ``APIRouter`` that ``vcards.app.create_app`` includes.
Routers translate service exceptions into HTTP status codes and never touch
the database directly.
"""

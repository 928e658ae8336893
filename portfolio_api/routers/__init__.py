"""FastAPI routers. Each module exposes a ``router`` included by the app factory."""

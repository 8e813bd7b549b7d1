# FastAPI Routers
from hookido.routers.hooks import create_hook_router

__all__ = ["create_hook_router"]

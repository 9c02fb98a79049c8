from .books import router as books_router
from .health import router as health_router
from .error_handlers import register_exception_handlers

__all__ = ["books_router", "health_router", "register_exception_handlers"]

from groundhog.api.routes import router

__all__ = ["router"]

from .auth_service import AdminGate

__all__ = ["AdminGate"]

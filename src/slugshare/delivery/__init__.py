from .delivery_service import DeliveryOutcome, DeliveryService

__all__ = ["DeliveryOutcome", "DeliveryService"]

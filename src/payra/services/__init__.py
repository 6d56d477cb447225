"""
Order query services
"""

from payra.services.order_service import OrderService

__all__ = ["OrderService"]

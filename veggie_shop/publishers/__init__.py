"""
Publishers package
"""
from veggie_shop.publishers.event_publisher import EventPublisher

__all__ = ["EventPublisher"]

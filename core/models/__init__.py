from .base import TimeStampedModel
from .config import ShopConfig

__all__ = [
    "TimeStampedModel",
    "ShopConfig",
]

from .item import ItemRecord

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'ItemRecord',
]

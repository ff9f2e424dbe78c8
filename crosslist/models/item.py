"""
Persisted inventory item record.

The crosslisting engine only reads and writes the listing-related columns;
descriptive columns are kept so marketplace adapters can build payloads.
Per-platform mappings are stored as JSON objects keyed by platform name with
ISO date strings as values.
"""

from sqlalchemy import Column, Integer, String, Float, Date, JSON, TIMESTAMP, text
from sqlalchemy.dialects.postgresql import JSONB

from ..database import Base

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class ItemRecord(Base):
    __tablename__ = "inventory_items"

    id = Column(String, primary_key=True)
    created_at = Column(
        TIMESTAMP(timezone=False),
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )
    updated_at = Column(
        TIMESTAMP(timezone=False),
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=text("CURRENT_TIMESTAMP"),
        nullable=False
    )

    # Core item information
    sku = Column(String, index=True)
    name = Column(String, default="")
    category = Column(String, index=True)
    condition = Column(String)
    notes = Column(String)
    price = Column(Float, default=0.0)
    qty = Column(Integer, default=0, nullable=False)
    upc = Column(String)
    isbn = Column(String)
    images = Column(JSONType, default=list)
    tags = Column(JSONType, default=list)
    added = Column(Date)

    # Listing state
    platforms = Column(JSONType, default=list)
    platform_status = Column(JSONType, default=dict)
    platform_listing_dates = Column(JSONType, default=dict)
    platform_listing_expiry = Column(JSONType, default=dict)
    last_relisted = Column(JSONType, default=dict)

    # Adapter-owned references, keyed by platform
    external_refs = Column(JSONType, default=dict)
    price_history = Column(JSONType, default=list)

    def __repr__(self):
        return f"<ItemRecord(id='{self.id}', sku='{self.sku}', qty={self.qty})>"

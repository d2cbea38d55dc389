from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text

from portfolio_ingest.core.database import Base


class IngestionRecord(Base):
    """One verbatim portfolio API response. Rows are never updated or deleted."""

    __tablename__ = "ingestion_record"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    payload = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)
    address_id = Column(Integer, ForeignKey("address.id"), nullable=False, index=True)

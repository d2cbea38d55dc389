from sqlalchemy import Column, Integer, String, UniqueConstraint

from portfolio_ingest.core.database import Base


class Wallet(Base):
    __tablename__ = "address"
    __table_args__ = (
        UniqueConstraint("address", name="uq_address_address"),
        {"sqlite_autoincrement": True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String(42), nullable=False)

    def __repr__(self) -> str:
        return f"<Wallet id={self.id} address={self.address}>"

import logging
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from portfolio_ingest.core.database import Base, create_sqlite_engine, make_session_factory, session_scope
from portfolio_ingest.core.errors import StorageError
from portfolio_ingest.models import IngestionRecord, Wallet
from portfolio_ingest.schemas.reports import WalletReportRow

logger = logging.getLogger(__name__)


class Storage:
    """Durable home for wallets and their ingestion records.

    One instance is built at process start and shared by the sweep, the
    scheduler and the HTTP handlers. ``open`` bootstraps the schema and seed
    wallets the first time the backing file is created; later calls reuse the
    cached engine.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._open_lock = Lock()

    @property
    def is_open(self) -> bool:
        return self._session_factory is not None

    def open(self, seed_addresses: Iterable[str] = ()) -> "Storage":
        with self._open_lock:
            if self._session_factory is not None:
                return self
            first_start = not self.path.exists()
            engine = None
            try:
                if first_start:
                    self.path.parent.mkdir(parents=True, exist_ok=True)
                    self.path.touch()
                engine = create_sqlite_engine(self.path)
                Base.metadata.create_all(bind=engine, checkfirst=True)
                session_factory = make_session_factory(engine)
                if first_start:
                    seeded = self._seed(session_factory, seed_addresses)
                    logger.info("Created store %s with %d seed wallets", self.path, seeded)
            except (OSError, SQLAlchemyError) as exc:
                if engine is not None:
                    engine.dispose()
                if first_start:
                    self._discard_partial_store()
                raise StorageError(f"failed to open store {self.path}: {exc}") from exc
            self._engine = engine
            self._session_factory = session_factory
            return self

    def _discard_partial_store(self) -> None:
        """Remove a store whose bootstrap failed so the next open seeds it again."""
        sidecars = [self.path.with_name(self.path.name + suffix) for suffix in ("-wal", "-shm")]
        for path in [self.path, *sidecars]:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not remove partial store file %s: %s", path, exc)

    def close(self) -> None:
        with self._open_lock:
            if self._engine is not None:
                self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def _require_factory(self) -> sessionmaker:
        factory = self._session_factory
        if factory is None:
            raise StorageError(f"store {self.path} is not open")
        return factory

    @staticmethod
    def _insert_wallet(session, address: str) -> Wallet:
        session.execute(sqlite_insert(Wallet).values(address=address).prefix_with("OR IGNORE"))
        return session.execute(select(Wallet).where(Wallet.address == address)).scalar_one()

    def _seed(self, session_factory: sessionmaker, addresses: Iterable[str]) -> int:
        with session_scope(session_factory) as session:
            wallets = {self._insert_wallet(session, address).id for address in addresses}
        return len(wallets)

    def add_wallet(self, address: str) -> Wallet:
        """Insert ``address`` unless it is already tracked; returns the stored wallet."""
        try:
            with session_scope(self._require_factory()) as session:
                return self._insert_wallet(session, address)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to add wallet {address}: {exc}") from exc

    def list_wallets(self) -> List[Wallet]:
        try:
            with session_scope(self._require_factory()) as session:
                return list(session.execute(select(Wallet).order_by(Wallet.id)).scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to list wallets: {exc}") from exc

    def append_record(self, wallet_id: int, payload: str, timestamp: datetime) -> IngestionRecord:
        try:
            with session_scope(self._require_factory()) as session:
                record = IngestionRecord(address_id=wallet_id, payload=payload, created_at=timestamp)
                session.add(record)
                session.flush()
                return record
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to store record for wallet {wallet_id}: {exc}") from exc

    def latest_report(self) -> List[WalletReportRow]:
        """One row per wallet with its newest record timestamp, or None."""
        stmt = (
            select(Wallet.address, func.max(IngestionRecord.created_at))
            .outerjoin(IngestionRecord, IngestionRecord.address_id == Wallet.id)
            .group_by(Wallet.id, Wallet.address)
            .order_by(Wallet.id)
        )
        try:
            with session_scope(self._require_factory()) as session:
                rows = session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to build report: {exc}") from exc
        return [WalletReportRow(address=address, created_at=created_at) for address, created_at in rows]

    def list_records(self, wallet_id: int, limit: Optional[int] = None) -> List[IngestionRecord]:
        """Records of one wallet, newest first."""
        stmt = (
            select(IngestionRecord)
            .where(IngestionRecord.address_id == wallet_id)
            .order_by(IngestionRecord.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            with session_scope(self._require_factory()) as session:
                return list(session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to list records for wallet {wallet_id}: {exc}") from exc

    def count_records(self, wallet_id: Optional[int] = None) -> int:
        stmt = select(func.count(IngestionRecord.id))
        if wallet_id is not None:
            stmt = stmt.where(IngestionRecord.address_id == wallet_id)
        try:
            with session_scope(self._require_factory()) as session:
                return session.execute(stmt).scalar_one()
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to count records: {exc}") from exc

"""Persistence for approval records.

Every mutation runs in its own transaction on the primary session factory
and is committed before this module returns. Reads go through the read
session factory, which may point at a replica.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from approved_revs.core.types import FileVersion
from approved_revs.db.models import ApprovedFile, ApprovedRevision

logger = logging.getLogger(__name__)


def _dialect_insert(session: Session):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
        return insert
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
        return insert
    if dialect in ("mysql", "mariadb"):
        from sqlalchemy.dialects.mysql import insert
        return insert
    return None


def upsert_statement(insert, model, key_column: str, key_value: Any, values: Dict[str, Any]):
    """Build a single-statement upsert with a dialect's ``insert`` construct."""
    stmt = insert(model).values({key_column: key_value, **values})
    if hasattr(stmt, "on_duplicate_key_update"):
        return stmt.on_duplicate_key_update({column: stmt.inserted[column] for column in values})
    return stmt.on_conflict_do_update(
        index_elements=[key_column],
        set_={column: stmt.excluded[column] for column in values},
    )


class ApprovalRepository:
    """
    Reads and writes the ``approved_revs`` and ``approved_revs_files`` tables.

    Upserts are a single atomic statement (``INSERT ... ON CONFLICT DO
    UPDATE`` or MySQL's ``ON DUPLICATE KEY UPDATE``) where the dialect
    supports it. Elsewhere a row lock on the item key is followed by
    update-or-insert, the insert in a savepoint that falls back to an
    update when another writer got there first.
    """

    def __init__(self, session_factory: sessionmaker, read_session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory
        self.read_session_factory = read_session_factory or session_factory

    # ---- pages ---------------------------------------------------------

    def get_approved_revision(self, page_id: int) -> Optional[int]:
        with self.read_session_factory() as session:
            record = session.query(ApprovedRevision).filter(
                ApprovedRevision.page_id == page_id
            ).first()
            return record.rev_id if record else None

    def save_approved_revision(self, page_id: int, rev_id: int) -> None:
        with self.session_factory.begin() as session:
            self._upsert(
                session,
                ApprovedRevision,
                key=("page_id", page_id),
                values={"rev_id": rev_id},
            )
        logger.debug("Saved approved revision %s for page %s", rev_id, page_id)

    def delete_approved_revision(self, page_id: int) -> int:
        with self.session_factory.begin() as session:
            deleted = session.query(ApprovedRevision).filter(
                ApprovedRevision.page_id == page_id
            ).delete(synchronize_session=False)
        logger.debug("Deleted %d approval record(s) for page %s", deleted, page_id)
        return deleted

    def list_approved_revisions(self) -> List[Tuple[int, int]]:
        with self.read_session_factory() as session:
            rows = session.query(ApprovedRevision).order_by(ApprovedRevision.page_id.asc()).all()
            return [(r.page_id, r.rev_id) for r in rows]

    # ---- files ---------------------------------------------------------

    def get_approved_file(self, file_key: str) -> Optional[FileVersion]:
        with self.read_session_factory() as session:
            record = session.query(ApprovedFile).filter(
                ApprovedFile.file_title == file_key
            ).first()
            if not record:
                return None
            return FileVersion(timestamp=record.approved_timestamp, sha1=record.approved_sha1)

    def save_approved_file(self, file_key: str, version: FileVersion) -> None:
        with self.session_factory.begin() as session:
            self._upsert(
                session,
                ApprovedFile,
                key=("file_title", file_key),
                values={
                    "approved_timestamp": version.timestamp,
                    "approved_sha1": version.sha1,
                },
            )
        logger.debug("Saved approved file version %s for %s", version.fingerprint, file_key)

    def delete_approved_file(self, file_key: str) -> int:
        with self.session_factory.begin() as session:
            deleted = session.query(ApprovedFile).filter(
                ApprovedFile.file_title == file_key
            ).delete(synchronize_session=False)
        logger.debug("Deleted %d file approval record(s) for %s", deleted, file_key)
        return deleted

    def list_approved_files(self) -> List[Tuple[str, FileVersion]]:
        with self.read_session_factory() as session:
            rows = session.query(ApprovedFile).order_by(ApprovedFile.file_title.asc()).all()
            return [
                (r.file_title, FileVersion(timestamp=r.approved_timestamp, sha1=r.approved_sha1))
                for r in rows
            ]

    # ---- helpers -------------------------------------------------------

    def _upsert(
        self,
        session: Session,
        model,
        *,
        key: Tuple[str, Any],
        values: Dict[str, Any],
    ) -> None:
        key_column, key_value = key
        insert = _dialect_insert(session)

        if insert is not None:
            session.execute(upsert_statement(insert, model, key_column, key_value, values))
            return

        key_filter = getattr(model, key_column) == key_value
        record = session.query(model).filter(key_filter).with_for_update().first()
        if record:
            for column, value in values.items():
                setattr(record, column, value)
            session.flush()
            return

        try:
            with session.begin_nested():
                session.add(model(**{key_column: key_value}, **values))
        except IntegrityError:
            # Another writer inserted the key after our lookup
            logger.debug("Concurrent insert for %s=%s; updating instead", key_column, key_value)
            session.query(model).filter(key_filter).update(values, synchronize_session=False)


__all__ = ["ApprovalRepository"]

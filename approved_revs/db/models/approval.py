"""Approval record models.

One live record per item: ``approved_revs`` for pages, keyed by page id,
and ``approved_revs_files`` for files, keyed by the stable file identity.
"""

from sqlalchemy import Column, Integer, String

from approved_revs.db.base import Base


class ApprovedRevision(Base):
    """Pointer from a page to its approved revision."""
    __tablename__ = "approved_revs"

    page_id = Column(Integer, primary_key=True, autoincrement=False)
    rev_id = Column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<ApprovedRevision page={self.page_id} rev={self.rev_id}>"


class ApprovedFile(Base):
    """Pointer from a file to its approved (timestamp, sha1) version."""
    __tablename__ = "approved_revs_files"

    file_title = Column(String(255), primary_key=True)
    approved_timestamp = Column(String(14), nullable=False)
    approved_sha1 = Column(String(64), nullable=False)

    def __repr__(self) -> str:
        return f"<ApprovedFile {self.file_title} sha1={self.approved_sha1[:8]}>"

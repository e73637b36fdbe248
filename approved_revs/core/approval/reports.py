"""Reports over the approval record tables.

Modes:
- ``ALL_APPROVED``: every approved item, flagged latest or not
- ``NOT_LATEST``: items whose approved version is not the latest one
- ``INVALID``: items that are approvable only because they already carry
  an approval, i.e. no policy zone (or legacy marker) covers them any more
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Union

from ..exceptions import ConfigurationError
from ..interfaces import ItemDirectory, LatestVersionLookup
from ..types import FileVersion, Item

if TYPE_CHECKING:
    from .service import ApprovalContext

logger = logging.getLogger(__name__)


class ReportMode(str, Enum):
    ALL_APPROVED = "allapproved"
    NOT_LATEST = "notlatest"
    INVALID = "invalid"


@dataclass
class ReportRow:
    item: Item
    approved: Union[int, FileVersion]
    latest: Optional[Union[int, FileVersion]] = None

    @property
    def is_latest(self) -> bool:
        return self.latest is not None and self.approved == self.latest


class ApprovalReports:
    def __init__(self, context: "ApprovalContext"):
        self.context = context
        collaborators = context.engine.collaborators
        if collaborators.items is None or collaborators.latest_versions is None:
            raise ConfigurationError("Reports require an item directory and a latest-version lookup")
        self.items: ItemDirectory = collaborators.items
        self.latest: LatestVersionLookup = collaborators.latest_versions

    def pages(self, mode: ReportMode = ReportMode.NOT_LATEST) -> List[ReportRow]:
        rows = []
        approvability = self.context.approvability
        for page_id, rev_id in self.context.engine.repository.list_approved_revisions():
            item = self.items.get(page_id)
            if item is None:
                logger.warning("Approval record for unknown page %s", page_id)
                continue
            row = ReportRow(item=item, approved=rev_id, latest=self.latest.latest_revision(item))
            if mode == ReportMode.NOT_LATEST and row.is_latest:
                continue
            if mode == ReportMode.INVALID and (
                approvability.title_in_permissions(item) or approvability.has_marker(item)
            ):
                continue
            rows.append(row)
        return rows

    def files(self, mode: ReportMode = ReportMode.NOT_LATEST) -> List[ReportRow]:
        rows = []
        approvability = self.context.approvability
        for file_key, version in self.context.engine.repository.list_approved_files():
            item = self.items.get_by_file_key(file_key)
            if item is None:
                logger.warning("Approval record for unknown file %s", file_key)
                continue
            row = ReportRow(item=item, approved=version, latest=self.latest.latest_file_version(item))
            if mode == ReportMode.NOT_LATEST and row.is_latest:
                continue
            if mode == ReportMode.INVALID and approvability.title_in_permissions(item):
                continue
            rows.append(row)
        return rows

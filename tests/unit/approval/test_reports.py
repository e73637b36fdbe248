"""Tests for approval reports."""

import pytest

from approved_revs.core.approval import ReportMode
from approved_revs.core.exceptions import ConfigurationError
from approved_revs.core.namespaces import NS_PROJECT
from approved_revs.core.types import FileVersion, Item


@pytest.fixture
def approved_pages(engine, host, main_page, help_page):
    """main_page approved at an old revision, help_page at its latest, plus a stray record."""
    stray = host.items.add(Item(70, NS_PROJECT, "About"))
    host.latest.revisions.update({main_page.id: 9, help_page.id: 20, stray.id: 3})
    engine.repository.save_approved_revision(main_page.id, 7)
    engine.repository.save_approved_revision(help_page.id, 20)
    engine.repository.save_approved_revision(stray.id, 2)
    engine.repository.save_approved_revision(999, 1)  # page no longer exists
    return main_page, help_page, stray


def ids(rows):
    return sorted(row.item.id for row in rows)


class TestPageReports:
    """Test page approval reports."""

    def test_all_approved(self, engine, approved_pages):
        rows = engine.new_context().reports().pages(ReportMode.ALL_APPROVED)
        assert ids(rows) == [1, 3, 70]

    def test_not_latest(self, engine, approved_pages):
        rows = engine.new_context().reports().pages()

        assert ids(rows) == [1, 70]
        row = next(r for r in rows if r.item.id == 1)
        assert (row.approved, row.latest, row.is_latest) == (7, 9, False)

    def test_invalid(self, engine, approved_pages):
        """Test pages approvable only because of their existing record."""
        rows = engine.new_context().reports().pages(ReportMode.INVALID)
        assert ids(rows) == [70]

    def test_marker_is_not_invalid(self, engine, host, approved_pages):
        host.markers.marked.add(70)
        assert engine.new_context().reports().pages(ReportMode.INVALID) == []


class TestFileReports:
    """Test file approval reports."""

    def test_not_latest_and_invalid(self, engine, host, file_item):
        approved = FileVersion("20240101120000", "aaa")
        host.latest.files[file_item.id] = FileVersion("20240202120000", "bbb")
        engine.repository.save_approved_file(file_item.file_key, approved)
        engine.repository.save_approved_file("Missing.png", approved)

        reports = engine.new_context().reports()

        assert ids(reports.files()) == [file_item.id]
        assert ids(reports.files(ReportMode.INVALID)) == [file_item.id]
        assert ids(reports.files(ReportMode.ALL_APPROVED)) == [file_item.id]

    def test_latest_file_excluded(self, engine, host, file_item):
        version = FileVersion("20240101120000", "aaa")
        host.latest.files[file_item.id] = version
        engine.repository.save_approved_file(file_item.file_key, version)

        assert engine.new_context().reports().files() == []


class TestReportConfiguration:
    def test_requires_item_directory(self, engine):
        engine.collaborators.items = None

        with pytest.raises(ConfigurationError):
            engine.new_context().reports()

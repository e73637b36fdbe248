"""Pytest configuration and shared fixtures."""

import pytest
from sqlalchemy.orm import sessionmaker

from approved_revs.core.approval import ApprovedRevs
from approved_revs.core.config import Settings, parse_policy_config
from approved_revs.core.namespaces import NS_CATEGORY, NS_FILE, NS_HELP, NS_MAIN, NS_TEMPLATE, NS_USER
from approved_revs.core.types import Actor, Item
from approved_revs.db.session import create_schema, make_engine
from tests.fakes import FakeHost


TEST_POLICY = {
    "All Pages": {"group": "sysop"},
    "Namespace Permissions": {
        "Main": {},
        "User": {},
        "Help": {"group": "editor"},
    },
    "Category Permissions": {
        "Reviewed": {"user": "Carol"},
    },
    "Page Permissions": {
        "Template:Infobox": {"user": "Dave"},
    },
}


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = make_engine("sqlite://")
    create_schema(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    yield factory
    engine.dispose()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        base_url="https://wiki.example.org/wiki",
    )


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def build_engine(settings, host, session_factory):
    """Factory for engines over the shared fake host and database."""

    def _build(policy=None, with_properties=True, **overrides):
        engine_settings = settings.model_copy(update=overrides) if overrides else settings
        return ApprovedRevs(
            engine_settings,
            host.collaborators(with_properties=with_properties),
            session_factory,
            policy=parse_policy_config(policy if policy is not None else TEST_POLICY),
        )

    return _build


@pytest.fixture
def engine(build_engine):
    return build_engine()


@pytest.fixture
def sysop():
    return Actor("Sally", frozenset({"sysop"}))


@pytest.fixture
def bob():
    return Actor("Bob")


@pytest.fixture
def main_page(host):
    """Existing main-namespace page with two revisions."""
    item = host.items.add(Item(1, NS_MAIN, "Foo"))
    host.content.add(item, 7, "first text", latest=False)
    host.content.add(item, 9, "second text")
    return item


@pytest.fixture
def user_page(host):
    return host.items.add(Item(2, NS_USER, "Bob/Drafts"))


@pytest.fixture
def help_page(host):
    item = host.items.add(Item(3, NS_HELP, "Editing"))
    host.content.add(item, 20, "how to edit")
    return item


@pytest.fixture
def template_page(host):
    return host.items.add(Item(4, NS_TEMPLATE, "Infobox"))


@pytest.fixture
def file_item(host):
    return host.items.add(Item(5, NS_FILE, "Logo image.png"))


@pytest.fixture
def category_page(host):
    return host.items.add(Item(6, NS_CATEGORY, "Reviewed"))

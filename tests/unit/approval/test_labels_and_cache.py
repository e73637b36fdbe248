"""Tests for audit labels, item naming and the request cache."""

from approved_revs.core.approval.cache import RequestCache
from approved_revs.core.approval.labels import file_label, item_url, revision_label
from approved_revs.core.namespaces import NS_FILE, NS_MAIN, NS_USER
from approved_revs.core.types import Actor, FileVersion, Item


class TestItemNames:
    def test_full_name(self):
        assert Item(1, NS_MAIN, "Foo").full_name == "Foo"
        assert Item(2, NS_USER, "Bob/Drafts").full_name == "User:Bob/Drafts"
        assert Item(3, 100, "Page", namespace_text="Portal").full_name == "Portal:Page"

    def test_unknown_namespace_without_name(self):
        assert Item(3, 100, "Page").full_name == "100:Page"
        assert Item(3, 100, "Page").full_name != Item(1, NS_MAIN, "Page").full_name

    def test_base_name_and_file_key(self):
        assert Item(2, NS_USER, "Bob/Drafts/Old").base_name == "Bob"
        assert Item(5, NS_FILE, "Logo image.png").file_key == "Logo_image.png"

    def test_anonymous_actor(self):
        assert Actor.anonymous().is_anonymous
        assert not Actor("Bob").is_anonymous


class TestLabels:
    def test_item_url_quotes_title(self):
        item = Item(1, NS_MAIN, "Fish & chips")
        assert item_url("https://wiki.example.org/wiki/", item) == "https://wiki.example.org/wiki/Fish_%26_chips"

    def test_revision_label(self):
        label = revision_label("https://wiki.example.org/wiki", Item(1, NS_MAIN, "Foo"), 42)
        assert label == '<a href="https://wiki.example.org/wiki/Foo?oldid=42">42</a>'

    def test_file_label_escaped(self):
        item = Item(5, NS_FILE, "Logo.png")
        label = file_label("https://wiki.example.org/wiki", item, FileVersion("20240101120000", "abcdef0123456789"))

        assert label == (
            '<a href="https://wiki.example.org/wiki/File:Logo.png?ts=20240101120000&amp;sha1=abcdef0123456789"'
            ' title="unique identifier: abcdef0123456789">abcdef01</a>'
        )


class TestRequestCache:
    def test_forget_item(self):
        item = Item(1, NS_MAIN, "Foo")
        other = Item(2, NS_MAIN, "Bar")
        cache = RequestCache()
        cache.approvable[item] = True
        cache.approvable[other] = True
        cache.can_approve[("Bob", item)] = False
        cache.approved_revision[item.id] = 7
        cache.approved_content[item.id] = "text"

        cache.forget_item(item)

        assert cache.approvable == {other: True}
        assert cache.can_approve == {}
        assert cache.approved_revision == {}
        assert cache.approved_content == {}

    def test_clear(self):
        cache = RequestCache()
        cache.file_info["Logo.png"] = None
        cache.categories[Item(1, NS_MAIN, "Foo")] = ("A",)

        cache.clear()

        assert cache.file_info == {}
        assert cache.categories == {}

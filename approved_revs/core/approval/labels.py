"""Audit-log labels for approved versions.

Labels are small HTML links rendered with Jinja2 (autoescaped): the
revision id for pages, the first eight characters of the content hash for
files.
"""

from urllib.parse import quote, urlencode

from jinja2 import Environment

from ..types import FileVersion, Item

_env = Environment(autoescape=True)

REVISION_LINK = _env.from_string('<a href="{{ url }}">{{ revision_id }}</a>')

FILE_LINK = _env.from_string(
    '<a href="{{ url }}" title="unique identifier: {{ sha1 }}">{{ fingerprint }}</a>'
)


def item_url(base_url: str, item: Item, **params) -> str:
    path = quote(item.full_name.replace(" ", "_"), safe=":/")
    url = f"{base_url.rstrip('/')}/{path}"
    if params:
        url += "?" + urlencode(params)
    return url


def revision_label(base_url: str, item: Item, revision_id: int) -> str:
    return REVISION_LINK.render(
        url=item_url(base_url, item, oldid=revision_id),
        revision_id=revision_id,
    )


def file_label(base_url: str, item: Item, version: FileVersion) -> str:
    return FILE_LINK.render(
        url=item_url(base_url, item, ts=version.timestamp, sha1=version.sha1),
        sha1=version.sha1,
        fingerprint=version.fingerprint,
    )

"""Canonical namespace table for approvable items.

Namespace ids follow the host platform's canonical numbering. The main
namespace has an empty name; ``"Main"`` is accepted as an alias for it in
configuration.
"""

from typing import Dict, Optional, Union


NS_MAIN = 0
NS_TALK = 1
NS_USER = 2
NS_USER_TALK = 3
NS_PROJECT = 4
NS_PROJECT_TALK = 5
NS_FILE = 6
NS_FILE_TALK = 7
NS_MEDIAWIKI = 8
NS_MEDIAWIKI_TALK = 9
NS_TEMPLATE = 10
NS_TEMPLATE_TALK = 11
NS_HELP = 12
NS_HELP_TALK = 13
NS_CATEGORY = 14
NS_CATEGORY_TALK = 15

# Returned for unknown namespace names; never equal to a real namespace id
NAMESPACE_NOT_FOUND = -999

CANONICAL_NAMESPACES: Dict[int, str] = {
    NS_MAIN: "",
    NS_TALK: "Talk",
    NS_USER: "User",
    NS_USER_TALK: "User talk",
    NS_PROJECT: "Project",
    NS_PROJECT_TALK: "Project talk",
    NS_FILE: "File",
    NS_FILE_TALK: "File talk",
    NS_MEDIAWIKI: "MediaWiki",
    NS_MEDIAWIKI_TALK: "MediaWiki talk",
    NS_TEMPLATE: "Template",
    NS_TEMPLATE_TALK: "Template talk",
    NS_HELP: "Help",
    NS_HELP_TALK: "Help talk",
    NS_CATEGORY: "Category",
    NS_CATEGORY_TALK: "Category talk",
}

# File description pages, interface messages and category pages cannot be
# approved through the legacy paths.
BANNED_NAMESPACES = frozenset({NS_FILE, NS_MEDIAWIKI, NS_CATEGORY})

USER_NAMESPACES = frozenset({NS_USER, NS_USER_TALK})


def namespace_name(namespace_id: int) -> str:
    """Return the canonical name for a namespace id.

    The main namespace is ''. An id outside the table is rendered as its
    number, so its titles never look like main-namespace titles.
    """
    return CANONICAL_NAMESPACES.get(namespace_id, str(namespace_id))


def namespace_id_from_name(name: str) -> int:
    """Resolve a canonical namespace name to its id.

    Underscores and spaces are interchangeable. Returns
    ``NAMESPACE_NOT_FOUND`` for names that do not exist.
    """
    wanted = name.replace("_", " ").strip()
    if wanted == "Main":
        wanted = ""
    for ns_id, ns_name in CANONICAL_NAMESPACES.items():
        if ns_name == wanted:
            return ns_id
    return NAMESPACE_NOT_FOUND


def resolve_namespace(key: Union[int, str, None]) -> Optional[int]:
    """Resolve a configuration key (id, numeric string, or name) to an id."""
    if key is None:
        return None
    if isinstance(key, bool):
        return NAMESPACE_NOT_FOUND
    if isinstance(key, int):
        return key
    text = str(key).strip()
    if text.lstrip("-").isdigit():
        return int(text)
    return namespace_id_from_name(text)

"""
Document tree helpers: parsing, traversal and the page metrics derived
directly from the tree (markup version, title, headings, login form).
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Iterator, List, Optional, Union

from bs4 import BeautifulSoup, Doctype, NavigableString, Tag

from page_analyzer.errors import MissingContentError, ParseError

logger = logging.getLogger(__name__)

# Subtrees rooted at these elements never hold content-bearing tags
IGNORED_TAGS: frozenset[str] = frozenset(("script", "link", "meta"))

HEADING_TAGS: tuple[str, ...] = ("h1", "h2", "h3", "h4")

LOGIN_INPUT_TYPES: frozenset[str] = frozenset(("email", "password"))

DOCTYPE_PREFIX = "-//W3C//DTD "
DOCTYPE_SUFFIX = "//EN"

_PUBLIC_ID = re.compile(r"\bPUBLIC\s+([\"'])(.*?)\1", re.IGNORECASE)
_SYSTEM_ID = re.compile(r"\bSYSTEM\s+([\"'])(.*?)\1", re.IGNORECASE)

TagPredicate = Callable[[str], bool]


def tag_named(name: str) -> TagPredicate:
    """Predicate matching exactly one tag name."""
    return lambda tag_name: tag_name == name


is_title: TagPredicate = tag_named("title")
is_anchor: TagPredicate = tag_named("a")
is_input: TagPredicate = tag_named("input")


def is_heading(tag_name: str) -> bool:
    return tag_name in HEADING_TAGS


def parse_document(markup: Union[bytes, str]) -> BeautifulSoup:
    """Build a read-only document tree from raw markup."""
    try:
        return BeautifulSoup(markup, "lxml")
    except Exception as e:
        raise ParseError(f"could not parse HTML body: {e}") from e


def iter_elements(root: Tag) -> Iterator[Tag]:
    """
    Yield elements in pre-order, depth-first.

    The subtree of every element named in IGNORED_TAGS is skipped entirely.
    Uses an explicit stack so deeply nested documents are safe.
    """
    stack: List[Tag] = [root]
    while stack:
        node = stack.pop()
        yield node
        children = [
            child for child in node.children
            if isinstance(child, Tag) and child.name not in IGNORED_TAGS
        ]
        stack.extend(reversed(children))


def find_first(root: Tag, predicate: TagPredicate) -> Optional[Tag]:
    """Return the first element matching `predicate`, or None."""
    for node in iter_elements(root):
        if predicate(node.name):
            return node
    return None


def collect(root: Tag, predicate: TagPredicate) -> Dict[str, List[Tag]]:
    """Group every element matching `predicate` by tag name, in document order."""
    found: Dict[str, List[Tag]] = {}
    for node in iter_elements(root):
        if predicate(node.name):
            found.setdefault(node.name, []).append(node)
    return found


def _declared_id(pattern: re.Pattern, declaration: str) -> str:
    match = pattern.search(declaration)
    return match.group(2) if match else ""


def resolve_markup_version(root: Tag) -> str:
    """
    Derive a markup version label from the document-type declaration.

    A bare declaration is HTML5. Otherwise the declared identifier has its
    W3C prefix and language suffix removed, e.g.
    "-//W3C//DTD HTML 4.01 Transitional//EN" -> "HTML 4.01 Transitional".
    Returns "" when the document has no declaration at all.
    """
    for node in root.descendants:
        if not isinstance(node, Doctype):
            continue

        identifier = _declared_id(_PUBLIC_ID, node) or _declared_id(_SYSTEM_ID, node)
        if not identifier:
            return "HTML5"

        if identifier.startswith(DOCTYPE_PREFIX):
            identifier = identifier[len(DOCTYPE_PREFIX):]
        if identifier.endswith(DOCTYPE_SUFFIX):
            identifier = identifier[:-len(DOCTYPE_SUFFIX)]
        return identifier

    return ""


def title_text(title: Tag) -> str:
    """Text of the first child of a <title>; raises MissingContentError if there is none."""
    first = next(iter(title.children), None)
    if not isinstance(first, NavigableString):
        raise MissingContentError("<title> element has no text")
    return str(first).strip()


def extract_title(root: Tag) -> str:
    title = find_first(root, is_title)
    if title is None:
        return ""
    try:
        return title_text(title)
    except MissingContentError:
        logger.debug("Empty <title>, reporting no title")
        return ""


def count_headings(root: Tag) -> Dict[str, int]:
    headings = collect(root, is_heading)
    return {level: len(headings.get(level, [])) for level in HEADING_TAGS}


def has_login_form(root: Tag) -> bool:
    """True if any input asks for an email address or a password."""
    inputs = collect(root, is_input).get("input", [])
    return any(
        (node.get("type") or "").strip().lower() in LOGIN_INPUT_TYPES
        for node in inputs
    )

"""Depth-prefixed listing parser — flat entries folded into a ``TreeNode``.

The listing is produced by ``cargo tree --prefix depth``: one line per
package, a leading run of digits giving the nesting depth, then the
package id with an optional parenthesized suffix::

    0my-app v0.1.0 (/home/me/my-app)
    1serde v1.0.130
    2serde_derive v1.0.130 (proc-macro)

The format varies between tool versions, so only the first line is held
to the grammar.  Any later line that does not parse is skipped.
"""

from __future__ import annotations

import logging
import re

from buildorbit.core.hasher import name_color
from buildorbit.models.tree import DuplicatePolicy, FlatEntry, TreeNode

logger = logging.getLogger(__name__)

MAX_DEPTH = 4096

_LINE_RE = re.compile(r"^(?P<depth>\d+)(?P<rest>\D.*)$")


class ParseError(ValueError):
    """Raised when a listing cannot produce a tree at all."""


class MalformedLineError(ParseError):
    """Raised for a single line that does not match the depth grammar."""


# ---------------------------------------------------------------------------
# Identity normalization
# ---------------------------------------------------------------------------


def _canonical_name(name: str) -> str:
    return name.strip().replace("_", "-")


def _identity(name: str, version: str) -> str:
    if version.startswith("v"):
        version = version[1:]
    return f"{_canonical_name(name)} {version}"


def _parse_pkgid_spec(spec: str) -> str:
    """Handle ``registry+https://…#serde@1.0.130`` style package ids."""
    location, _, fragment = spec.partition("#")
    if "@" in fragment:
        name, _, version = fragment.rpartition("@")
        return _identity(name, version)
    location = location.split("?", 1)[0].rstrip("/")
    name = location.rsplit("/", 1)[-1]
    return _identity(name, fragment)


def parse_identity(package_id: str) -> str:
    """Normalize a package id to the ``"<name> <version>"`` identity.

    The same function is used for listing lines and for build output, so
    names from both sources compare equal without further translation.

    >>> parse_identity("serde_json v1.0.68 (registry+https://x)")
    'serde-json 1.0.68'
    """
    text = package_id.strip()
    if "#" in text and " " not in text:
        return _parse_pkgid_spec(text)

    stop = text.find(" (")
    if stop != -1:
        text = text[:stop]

    parts = text.strip().rsplit(None, 1)
    if not parts:
        return ""
    if len(parts) == 1:
        return _canonical_name(parts[0])
    return _identity(parts[0], parts[1])


# ---------------------------------------------------------------------------
# Flat parsing
# ---------------------------------------------------------------------------


def parse_line(line: str) -> FlatEntry:
    """Parse one ``<depth><identity>`` line."""
    match = _LINE_RE.match(line)
    if match is None:
        raise MalformedLineError(f"No depth prefix in line: {line!r}")

    depth = int(match.group("depth"))
    if depth > MAX_DEPTH:
        raise MalformedLineError(f"Depth {depth} exceeds maximum {MAX_DEPTH}")

    identity = parse_identity(match.group("rest"))
    if not identity:
        raise MalformedLineError(f"No identity in line: {line!r}")

    return FlatEntry(depth=depth, identity=identity)


def parse_flat(text: str) -> list[FlatEntry]:
    """Parse every line of *text*.

    Blank lines are ignored.  The first remaining line must parse or
    ``ParseError`` is raised; later malformed lines are skipped.
    """
    entries: list[FlatEntry] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            entries.append(parse_line(line))
        except MalformedLineError as exc:
            if not entries:
                raise ParseError(f"Line {lineno}: {exc}") from exc
            logger.debug("Skipping malformed line %d: %r", lineno, line)

    if not entries:
        raise ParseError("Dependency listing is empty")
    return entries


# ---------------------------------------------------------------------------
# Tree folding
# ---------------------------------------------------------------------------


class _Draft:
    """Mutable node used only while folding."""

    __slots__ = ("depth", "name", "children", "seen", "node")

    def __init__(self, entry: FlatEntry) -> None:
        self.depth = entry.depth
        self.name = entry.identity
        self.children: list[_Draft] = []
        self.seen: set[str] = set()
        self.node: TreeNode | None = None


def _freeze(root: _Draft) -> TreeNode:
    """Build immutable nodes bottom-up without recursion."""
    stack: list[tuple[_Draft, bool]] = [(root, False)]
    while stack:
        draft, expanded = stack.pop()
        if not expanded:
            stack.append((draft, True))
            stack.extend((child, False) for child in draft.children)
            continue

        children = sorted(
            (child.node for child in draft.children),
            key=lambda n: (n.descendant_count, n.name),
        )
        draft.node = TreeNode(
            name=draft.name,
            color=name_color(draft.name),
            children=tuple(children),
            descendant_count=sum(c.descendant_count + 1 for c in children),
        )
        # Release drafts as soon as their parent can no longer need them.
        for child in draft.children:
            child.node = None
        draft.children = []

    return root.node


def build_tree(
    entries: list[FlatEntry],
    policy: DuplicatePolicy = DuplicatePolicy.KEEP_FIRST,
) -> TreeNode:
    """Fold flat entries into a tree rooted at ``entries[0]``.

    Only entries exactly one level below an ancestor become children.  An
    entry that skips a level is unreachable and is dropped together with
    everything nested under it.  Folding stops at the first entry whose
    depth is not greater than the root's.

    With ``DuplicatePolicy.KEEP_FIRST`` a repeated identity among the
    children of one parent keeps only its first occurrence.
    """
    if not entries:
        raise ParseError("Cannot build a tree from an empty listing")

    root = _Draft(entries[0])
    stack = [root]
    dropped = 0

    for entry in entries[1:]:
        if entry.depth <= root.depth:
            break

        while stack[-1].depth >= entry.depth:
            stack.pop()
        parent = stack[-1]

        if entry.depth != parent.depth + 1:
            dropped += 1
            continue

        draft = _Draft(entry)
        duplicate = entry.identity in parent.seen
        if duplicate and policy == DuplicatePolicy.KEEP_FIRST:
            # Still pushed so that its own children fold into it and vanish.
            dropped += 1
        else:
            parent.children.append(draft)
            parent.seen.add(entry.identity)
        stack.append(draft)

    if dropped:
        logger.debug("Dropped %d unreachable or duplicate entries", dropped)
    return _freeze(root)


def parse_tree(
    text: str,
    policy: DuplicatePolicy = DuplicatePolicy.KEEP_FIRST,
) -> TreeNode:
    """Parse a depth-prefixed listing into its root ``TreeNode``."""
    return build_tree(parse_flat(text), policy)

"""Stable anchors linking summary rows and detail blocks."""

import hashlib
import re
from dataclasses import dataclass

_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9_-]+")
SUBSTITUTE = "-"


@dataclass(frozen=True, kw_only=True)
class Anchor:
    """Link target and the declaration that makes it resolvable."""

    identifier: str

    @property
    def link_target(self) -> str:
        """Fragment used by links jumping to this anchor."""
        return f"#{self.identifier}"

    @property
    def declaration(self) -> str:
        """Markup emitted once at the anchored location."""
        return f'<a name="{self.identifier}"></a>'

    def link(self, text: str) -> str:
        """HTML link to this anchor."""
        return f'<a href="{self.link_target}">{text}</a>'


def normalize(part: str) -> str:
    """Fold case, whitespace and punctuation of one key part."""
    folded = _WHITESPACE_RE.sub(" ", part.strip()).casefold()
    return _DISALLOWED_RE.sub(SUBSTITUTE, folded).strip(SUBSTITUTE)


def anchor(scope: str, *key_parts: str) -> Anchor:
    """Derive the anchor of a ``(scope, *key_parts)`` location.

    Equal tuples after normalization give equal anchors. The readable prefix
    may coincide for different tuples, so a digest of the normalized tuple is
    appended.
    """
    parts = [normalize(part) for part in (scope, *key_parts)]
    digest = hashlib.sha1("\x1f".join(parts).encode()).hexdigest()[:10]
    readable = "_".join(part for part in parts if part)
    return Anchor(identifier=f"{readable}-{digest}" if readable else digest)

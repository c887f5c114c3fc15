"""Realm path resolution from request contexts."""
from __future__ import annotations
from typing import Optional

from .resources import RequestContext

ROOT_REALM = "/"


def normalize_realm(realm: Optional[str]) -> str:
    """Normalize a realm path.

    Leading slash, no trailing slash, no empty segments. ``None``, empty
    strings and ``root`` map to the root realm.

    Examples:
        >>> normalize_realm("sub//child/")
        '/sub/child'
        >>> normalize_realm(None)
        '/'
    """
    if not realm:
        return ROOT_REALM
    segments = [segment for segment in realm.strip().split("/") if segment]
    if segments and segments[0] == "root":
        segments = segments[1:]
    if not segments:
        return ROOT_REALM
    return "/" + "/".join(segments)


def get_realm(context: RequestContext) -> str:
    """Return the realm a request is scoped to (root when unset)."""
    return normalize_realm(context.realm)

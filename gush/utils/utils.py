"""
Gush Utilities
"""

import hashlib
from datetime import datetime, timezone
from typing import Optional, Tuple


def mask_secret(secret: str, length: int = 5) -> str:
    """Return a short SHA-256 hash of a secret for logging."""
    h = hashlib.sha256(str(secret).encode("utf-8")).hexdigest()
    return f"<masked:{h[:length]}>"


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse provider ISO-8601 timestamps ('2025-02-26T08:30:00Z', '...+01:00').

    Naive values are assumed to be UTC. Returns None for empty or unparsable input.
    """
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_head(head: str, default_org: Optional[str] = None) -> Tuple[Optional[str], str]:
    """Split ``org:branch`` notation into (org, branch).

    A bare branch name resolves to ``default_org``.

    Raises:
        ValueError: If the org or branch part is empty.
    """
    head = head.strip()
    if ":" not in head:
        if not head:
            raise ValueError("Branch name cannot be empty")
        return default_org, head

    org, branch = head.split(":", 1)
    if not org or not branch:
        raise ValueError(f"Expected org:branch notation (got '{head}')")
    return org, branch


def format_head(org: Optional[str], branch: str) -> str:
    """Build ``org:branch`` notation; a missing org yields the bare branch."""
    return f"{org}:{branch}" if org else branch


def parse_repo_name(full_name: str) -> Tuple[str, str]:
    """Split 'owner/repo' into its two parts.

    Raises:
        ValueError: If the name is not in owner/repo format.
    """
    parts = full_name.strip().strip("/").split("/")
    if len(parts) < 2 or not all(parts):
        raise ValueError(f"Repository must be in owner/repo format (got '{full_name}')")
    # GitLab subgroups: everything but the last segment is the namespace
    return "/".join(parts[:-1]), parts[-1]

# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Normalized, provider-agnostic records returned by every adapter.

Fields a provider cannot fill are kept as ``None`` (``False`` for booleans),
never dropped, so ``to_dict()`` always yields the same keys.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

RecordId = Union[int, str]


class AssetState(Enum):
    """Upload state of a release asset"""

    UPLOADED = "uploaded"
    EMPTY = "empty"
    UPLOADING = "uploading"


class _Record:
    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        return data


@dataclass
class ForkOrigin(_Record):
    """The upstream a repository was forked from"""

    org: Optional[str] = None
    repo: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.org}/{self.repo}"


@dataclass
class RepositoryInfo(_Record):
    """Repository information"""

    owner: Optional[str]
    html_url: Optional[str]
    fetch_url: Optional[str]
    push_url: Optional[str]
    is_fork: bool = False
    is_private: bool = False
    fork_origin: Optional[ForkOrigin] = None  # None when this repo is the root of its fork chain


@dataclass
class ForkResult(_Record):
    git_url: Optional[str]
    html_url: Optional[str]


@dataclass
class PullRequestRef(_Record):
    """One side (head or base) of a pull request"""

    ref: Optional[str] = None
    sha: Optional[str] = None
    user: Optional[str] = None
    repo: Optional[str] = None
    label: Optional[str] = None


@dataclass
class PullRequest(_Record):
    """A pull request (merge request on GitLab) with normalized metadata"""

    number: int
    url: Optional[str]
    state: Optional[str]
    title: Optional[str]
    body: Optional[str] = None
    labels: List[str] = field(default_factory=list)
    milestone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[str] = None
    assignee: Optional[str] = None
    merge_commit: Optional[str] = None
    merged: bool = False
    merged_by: Optional[str] = None
    head: PullRequestRef = field(default_factory=PullRequestRef)
    base: PullRequestRef = field(default_factory=PullRequestRef)


@dataclass
class PullRequestLink(_Record):
    """Identifiers of an opened (or switched) pull request"""

    html_url: Optional[str]
    number: int


@dataclass
class Commit(_Record):
    sha: str
    message: Optional[str] = None
    user: Optional[str] = None

    @property
    def title(self) -> str:
        """First line of the commit message"""
        return (self.message or "").split("\n", 1)[0]


@dataclass
class Comment(_Record):
    id: RecordId
    url: Optional[str] = None
    body: Optional[str] = None
    user: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Release(_Record):
    """A tagged version with additional information like a changelog"""

    id: RecordId
    url: Optional[str] = None
    name: Optional[str] = None
    tag_name: Optional[str] = None
    body: Optional[str] = None
    draft: bool = False
    prerelease: bool = False
    created_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    user: Optional[str] = None


@dataclass
class ReleaseLink(_Record):
    url: Optional[str]
    id: RecordId


@dataclass
class ReleaseAsset(_Record):
    """A binary artifact attached to exactly one release. Size is in bytes."""

    id: RecordId
    url: Optional[str] = None
    name: Optional[str] = None
    label: Optional[str] = None
    state: Optional[AssetState] = None
    content_type: Optional[str] = None
    size: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    uploader: Optional[str] = None

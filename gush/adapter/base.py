# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Adapter contract implemented by every hosting provider.

Note that each adapter instance can only be used for one repository.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from gush.adapter.exceptions import (
    AdapterError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    UnsupportedOperationError,
)
from gush.classes import (
    Comment,
    Commit,
    ForkResult,
    PullRequest,
    PullRequestLink,
    RecordId,
    Release,
    ReleaseAsset,
    ReleaseLink,
    RepositoryInfo,
)
from gush.utils.utils import format_head, parse_head

logger = logging.getLogger(__name__)


class Capability(Enum):
    """Optional features a provider may or may not offer"""

    LABELS = "labels"
    MILESTONES = "milestones"
    RELEASES = "releases"
    RELEASE_ASSETS = "release_assets"
    SWITCH_BASE = "switch_base"


class Adapter(ABC):
    """Normalized operation set over one hosted repository.

    Subclasses translate each operation into provider HTTP calls and return the
    records from ``gush.classes``. Failures surface as ``AdapterError``, except
    for ``authenticate``/``is_authenticated`` which answer False for expected
    failures.
    """

    name: str = ''
    CAPABILITIES: FrozenSet[Capability] = frozenset()
    PULL_REQUEST_STATES: Tuple[str, ...] = ()

    def __init__(self, org: str, repo: str, config: Optional[Dict[str, Any]] = None):
        self.org = org
        self.repo = repo
        self.config: Dict[str, Any] = dict(config or {})
        self.username: Optional[str] = self.config.get('username') or None
        self.copy_milestone = bool(self.config.get('copy_milestone', True))
        self._authenticated = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.org}/{self.repo})"

    @property
    def full_name(self) -> str:
        return f"{self.org}/{self.repo}"

    def close(self) -> None:
        """Release resources held by the adapter."""

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    @property
    def capabilities(self) -> FrozenSet[Capability]:
        return self.CAPABILITIES

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def _require(self, capability: Capability, operation: str) -> None:
        if not self.supports(capability):
            raise UnsupportedOperationError(f"{self.name or type(self).__name__} does not support {operation}")

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @abstractmethod
    def supports_repository(self, remote_url: str) -> bool:
        """Return whether the remote URL is hosted by this provider. Never touches the network."""

    def authenticate(self) -> bool:
        """Verify the configured credentials.

        Returns False when the provider rejects them; only transport faults raise.
        """
        try:
            username = self._fetch_authenticated_user()
        except (UnauthorizedError, NotFoundError) as e:
            logger.info(f"Authentication against {self.name} failed: {e}")
            self._authenticated = False
            return False

        if username:
            self.username = username
        self._authenticated = True
        logger.debug(f"Authenticated against {self.name} as {self.username}")
        return True

    def is_authenticated(self) -> bool:
        return self._authenticated

    @abstractmethod
    def _fetch_authenticated_user(self) -> Optional[str]:
        """Return the login behind the configured credentials."""

    @abstractmethod
    def get_token_generation_url(self) -> Optional[str]:
        """URL where a user can create an access token, None without a token flow."""

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    @abstractmethod
    def create_fork(self, org: str) -> ForkResult:
        """Fork the bound repository into ``org``."""

    @abstractmethod
    def get_repository_info(self, org: str, repo: str) -> RepositoryInfo:
        """Fetch information about ``org/repo``."""

    @abstractmethod
    def create_repo(
        self,
        name: str,
        description: str,
        homepage: str,
        public: bool = True,
        organization: Optional[str] = None,
        has_issues: bool = True,
        has_wiki: bool = False,
        has_downloads: bool = False,
        team_id: int = 0,
        auto_init: bool = True,
    ) -> RepositoryInfo:
        """Create a new repository under the user or ``organization``."""

    # ------------------------------------------------------------------
    # Comments, labels, milestones
    # ------------------------------------------------------------------

    @abstractmethod
    def create_comment(self, id: int, message: str) -> Optional[str]:
        """Comment on an issue/pull request and return the comment URL."""

    @abstractmethod
    def get_comments(self, id: int) -> List[Comment]:
        ...

    @abstractmethod
    def get_labels(self) -> List[str]:
        """Names of the repository labels, empty when the provider has none."""

    @abstractmethod
    def get_milestones(self, parameters: Optional[Dict[str, Any]] = None) -> List[str]:
        ...

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    @abstractmethod
    def open_pull_request(
        self, base: str, head: str, subject: str, body: str, parameters: Optional[Dict[str, Any]] = None
    ) -> PullRequestLink:
        """Open a pull request from ``head`` (org:branch) into ``base``."""

    @abstractmethod
    def get_pull_request(self, id: int) -> PullRequest:
        ...

    @abstractmethod
    def get_pull_request_commits(self, id: int) -> List[Commit]:
        ...

    @abstractmethod
    def merge_pull_request(self, id: int, message: str) -> str:
        """Merge and return the sha1 of the merge commit."""

    @abstractmethod
    def update_pull_request(self, id: int, parameters: Dict[str, Any]) -> None:
        """Change only the supplied keys (title, body, state, labels, milestone, assignee)."""

    @abstractmethod
    def close_pull_request(self, id: int) -> None:
        ...

    @abstractmethod
    def _list_pull_requests(self, state: Optional[str], page: int, per_page: int) -> List[PullRequest]:
        """Fetch one page of pull requests; ``state`` is already validated."""

    def get_pull_requests(self, state: Optional[str] = None, page: int = 1, per_page: int = 30) -> List[PullRequest]:
        """List pull requests, optionally filtered by one of ``get_pull_request_states()``."""
        if state is not None and state not in self.get_pull_request_states():
            raise AdapterError(
                f"Unsupported pull request state '{state}', expected one of: "
                f"{', '.join(self.get_pull_request_states())}"
            )
        return self._list_pull_requests(state, page, per_page)

    def get_pull_request_states(self) -> List[str]:
        return list(self.PULL_REQUEST_STATES)

    def _change_pull_request_base(self, pr_number: int, new_base: str) -> PullRequestLink:
        """Retarget a pull request in place; only called with the SWITCH_BASE capability."""
        raise UnsupportedOperationError(f"{self.name} cannot change the base of a pull request")

    def switch_pull_request_base(
        self, pr_number: int, new_base: str, new_head: str, force_new_pr: bool = False
    ) -> PullRequestLink:
        """Point a pull request at ``new_base``.

        Switches in place when the provider can and the head stays the same.
        Otherwise opens a new pull request with the same subject, body and
        labels (and milestone when ``copy_milestone`` is set), closes the old
        one with a reference to its replacement, and returns the new one.
        Raises ``ConflictError`` before changing anything when the pull request
        is not open.
        """
        pull_request = self.get_pull_request(pr_number)
        if pull_request.state != "open":
            raise ConflictError(
                f"Pull request #{pr_number} is {pull_request.state}, only open pull requests can be switched"
            )

        current_org = pull_request.head.user or self.org
        try:
            head_org, head_branch = parse_head(new_head, default_org=current_org)
        except ValueError as e:
            raise AdapterError(str(e)) from e

        same_head = head_branch == pull_request.head.ref and head_org == current_org
        if self.supports(Capability.SWITCH_BASE) and same_head and not force_new_pr:
            logger.info(f"Switching base of #{pr_number} to '{new_base}' in place")
            return self._change_pull_request_base(pr_number, new_base)

        new_pull_request = self.open_pull_request(
            new_base, format_head(head_org, head_branch), pull_request.title or '', pull_request.body or ''
        )
        logger.info(f"Opened #{new_pull_request.number} to replace #{pr_number}")

        carried: Dict[str, Any] = {}
        if pull_request.labels and self.supports(Capability.LABELS):
            carried['labels'] = list(pull_request.labels)
        if pull_request.milestone and self.copy_milestone and self.supports(Capability.MILESTONES):
            carried['milestone'] = pull_request.milestone
        if carried:
            self.update_pull_request(new_pull_request.number, carried)

        replacement = new_pull_request.html_url or f"#{new_pull_request.number}"
        self.create_comment(pr_number, f"Closed in favor of {replacement}")
        self.close_pull_request(pr_number)
        return new_pull_request

    # ------------------------------------------------------------------
    # Releases
    # ------------------------------------------------------------------

    @abstractmethod
    def create_release(self, name: str, parameters: Optional[Dict[str, Any]] = None) -> ReleaseLink:
        """Create a release for tag ``name``."""

    def create_release_assets(self, id: RecordId, name: str, content_type: str, content: bytes) -> RecordId:
        """Attach a raw binary asset to release ``id`` and return the asset id."""
        raise UnsupportedOperationError(f"{self.name} does not support uploading release assets")

    @abstractmethod
    def get_releases(self) -> List[Release]:
        ...

    @abstractmethod
    def get_release_assets(self, id: RecordId) -> List[ReleaseAsset]:
        ...

    @abstractmethod
    def remove_release(self, id: RecordId) -> None:
        ...

# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Adapter registry and auto-selection by remote URL.
"""

import logging
from typing import Any, Dict, Optional, Type

from gush.adapter.base import Adapter
from gush.adapter.bitbucket import BitbucketAdapter
from gush.adapter.exceptions import AdapterError
from gush.adapter.github import GitHubAdapter
from gush.adapter.gitlab import GitLabAdapter
from gush.utils.git import parse_remote_url

logger = logging.getLogger(__name__)

ADAPTERS: Dict[str, Type[Adapter]] = {
    GitHubAdapter.name: GitHubAdapter,
    GitLabAdapter.name: GitLabAdapter,
    BitbucketAdapter.name: BitbucketAdapter,
}

# Keys that point an adapter at a specific host
_HOST_KEYS = ('api_url', 'web_url', 'uploads_url')


def create_adapter(name: str, org: str, repo: str, config: Optional[Dict[str, Any]] = None) -> Adapter:
    """Instantiate the adapter registered as ``name`` for ``org/repo``."""
    adapter_class = ADAPTERS.get((name or '').lower())
    if adapter_class is None:
        raise AdapterError(f"Unknown adapter '{name}', expected one of: {', '.join(sorted(ADAPTERS))}")
    return adapter_class(org, repo, config)


def detect_adapter_name(remote_url: str, config: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """Return the name of the first adapter that supports ``remote_url``, or None.

    A configured ``adapter`` only claims its own ``web_url`` host; every other
    adapter is matched against its public host.
    """
    config = dict(config or {})
    try:
        _, org, repo = parse_remote_url(remote_url)
    except ValueError:
        logger.debug(f"Cannot detect adapter for unparsable remote '{remote_url}'")
        return None

    configured = config.get('adapter')
    public_config = {key: value for key, value in config.items() if key not in _HOST_KEYS}
    for name, adapter_class in ADAPTERS.items():
        adapter = adapter_class(org, repo, config if name == configured else public_config)
        try:
            if adapter.supports_repository(remote_url):
                return name
        finally:
            adapter.close()
    return None

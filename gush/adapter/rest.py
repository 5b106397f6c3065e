# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared base for adapters backed by a JSON REST API.
"""

from typing import Any, Dict, FrozenSet, Optional, Tuple
from urllib.parse import urlparse

import requests

from gush.adapter.base import Adapter
from gush.constants import DEFAULT_REQUEST_TIMEOUT, USER_AGENT
from gush.utils.git import parse_remote_url
from gush.utils.http_tools import json_or_none, send_request


class RestAdapter(Adapter):
    """Adapter that owns a ``requests.Session`` bound to one provider API."""

    DEFAULT_API_URL = ''
    DEFAULT_WEB_URL = ''

    def __init__(
        self,
        org: str,
        repo: str,
        config: Optional[Dict[str, Any]] = None,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(org, repo, config)
        self.api_url = (self.config.get('api_url') or self.DEFAULT_API_URL).rstrip('/')
        self.web_url = (self.config.get('web_url') or self.DEFAULT_WEB_URL).rstrip('/')
        self.timeout = int(self.config.get('timeout') or DEFAULT_REQUEST_TIMEOUT)
        self.token: Optional[str] = self.config.get('token') or None

        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': USER_AGENT})
        self._configure_auth(self.session)

    def _configure_auth(self, session: requests.Session) -> None:
        """Attach credentials to the session."""

    @property
    def hosts(self) -> FrozenSet[str]:
        hosts = {urlparse(self.DEFAULT_WEB_URL).hostname, urlparse(self.web_url).hostname}
        return frozenset(host.lower() for host in hosts if host)

    def supports_repository(self, remote_url: str) -> bool:
        try:
            host, _, _ = parse_remote_url(remote_url)
        except ValueError:
            return False
        return host in self.hosts

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        if path.startswith(('http://', 'https://')):
            return path
        return f"{self.api_url}{path}"

    def _request(self, method: str, path: str, context: str = '', **kwargs: Any) -> requests.Response:
        return send_request(self.session, method, self._url(path), context=context, timeout=self.timeout, **kwargs)

    def _get(self, path: str, context: str = '', params: Optional[Dict[str, Any]] = None) -> Any:
        return json_or_none(self._request('GET', path, context, params=params))

    def _post(self, path: str, context: str = '', payload: Optional[Dict[str, Any]] = None) -> Any:
        return json_or_none(self._request('POST', path, context, json=payload))

    def _put(self, path: str, context: str = '', payload: Optional[Dict[str, Any]] = None) -> Any:
        return json_or_none(self._request('PUT', path, context, json=payload))

    def _patch(self, path: str, context: str = '', payload: Optional[Dict[str, Any]] = None) -> Any:
        return json_or_none(self._request('PATCH', path, context, json=payload))

    def _delete(self, path: str, context: str = '') -> None:
        self._request('DELETE', path, context)


def login_of(user: Optional[Dict[str, Any]], *keys: str) -> Optional[str]:
    """Return the first present name key of a provider user object."""
    if not user:
        return None
    for key in keys or ('login',):
        if user.get(key):
            return user[key]
    return None


def split_full_name(full_name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """'org/repo' -> ('org', 'repo'); None-safe."""
    if not full_name or '/' not in full_name:
        return None, full_name
    org, repo = full_name.rsplit('/', 1)
    return org, repo

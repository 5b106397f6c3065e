# The MIT License (MIT)
# Copyright © 2025 Entrius

from pathlib import Path

# =============================================================================
# Provider endpoints
# =============================================================================
BASE_GITHUB_API_URL = "https://api.github.com"
GITHUB_UPLOADS_URL = "https://uploads.github.com"
GITHUB_WEB_URL = "https://github.com"

BASE_GITLAB_API_URL = "https://gitlab.com/api/v4"
GITLAB_WEB_URL = "https://gitlab.com"

BASE_BITBUCKET_API_URL = "https://api.bitbucket.org/2.0"
BITBUCKET_WEB_URL = "https://bitbucket.org"

# =============================================================================
# HTTP
# =============================================================================
DEFAULT_REQUEST_TIMEOUT = 30  # seconds
USER_AGENT = "gush-cli"
RATE_LIMIT_MIN_REMAINING = 10  # Warn once fewer requests than this remain

# =============================================================================
# CLI defaults
# =============================================================================
DEFAULT_BASE_BRANCH = "master"
DEFAULT_REMOTE = "origin"
DEFAULT_PER_PAGE = 30

GUSH_DIR = Path.home() / '.gush'
CONFIG_FILE = GUSH_DIR / 'config.json'
LOG_DIR = GUSH_DIR / 'logs'

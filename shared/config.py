"""
FSS configuration
Environment-driven settings and the credential provider
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from shared.errors import NotConfigured

# Configuration from environment
FRESHDESK_API_KEY = os.getenv("FRESHDESK_API_KEY", "")
FRESHDESK_DOMAIN = os.getenv("FRESHDESK_DOMAIN", "")
DATA_DIR = Path(os.getenv("FSS_DATA_DIR", str(Path.home() / ".fss")))
UPDATED_SINCE = os.getenv("FSS_UPDATED_SINCE", "2025-01-01T00:00:00Z")
HTTP_TIMEOUT = float(os.getenv("FSS_HTTP_TIMEOUT", "30"))
LOG_LEVEL = os.getenv("FSS_LOG_LEVEL", "INFO")

CONTACT_CACHE_FILE = "contactCache.json"
AGENT_CACHE_FILE = "agentCache.json"


@dataclass(frozen=True)
class Credentials:
    """API key and base URL of a Freshdesk account"""
    api_key: str
    domain: str

    def __repr__(self) -> str:
        return f"Credentials(api_key='***', domain={self.domain!r})"


def normalize_domain(domain: str) -> str:
    """Strip trailing slashes and default to https when no scheme is given"""
    domain = domain.strip().rstrip("/")
    if domain and "://" not in domain:
        domain = f"https://{domain}"
    return domain


def load_credentials(
    api_key: Optional[str] = None,
    domain: Optional[str] = None,
) -> Credentials:
    """
    Resolve credentials from arguments, falling back to the environment.

    Raises:
        NotConfigured: if the API key or domain is empty
    """
    key = (api_key if api_key is not None else FRESHDESK_API_KEY).strip()
    base = normalize_domain(domain if domain is not None else FRESHDESK_DOMAIN)

    missing = [name for name, value in (("api_key", key), ("domain", base)) if not value]
    if missing:
        raise NotConfigured(f"Freshdesk credentials missing: {', '.join(missing)}")

    return Credentials(api_key=key, domain=base)

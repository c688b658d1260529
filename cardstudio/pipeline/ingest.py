from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import httpx

from .. import config
from ..engine.document import DesignDocument, parse_document
from ..errors import MalformedDocument

logger = logging.getLogger(__name__)


def load_document(path: Path, sku: Optional[str] = None) -> DesignDocument:
    if not path.exists():
        raise MalformedDocument(f"Template not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise MalformedDocument(f"Template {path} is not valid JSON: {exc}") from exc
    return parse_document(data, sku=sku)


def fetch_document(
    sku: str,
    base_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> DesignDocument:
    """Fetch ``/products/{sku}`` from the admin API; any failure is fatal for the session."""
    url = f"{(base_url or config.API_BASE_URL).rstrip('/')}/products/{sku}"
    owns_client = client is None
    client = client or httpx.Client(timeout=config.REQUEST_TIMEOUT, follow_redirects=True)
    try:
        response = client.get(url)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as exc:
        logger.warning("Fetching %s failed: %s", sku, exc)
        raise MalformedDocument(f"Template {sku} unavailable: {exc}") from exc
    except ValueError as exc:
        raise MalformedDocument(f"Template {sku} returned invalid JSON") from exc
    finally:
        if owns_client:
            client.close()
    return parse_document(data, sku=sku)


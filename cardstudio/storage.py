from __future__ import annotations

from pathlib import Path
from typing import Optional

from slugify import slugify

from . import config
from .models import Draft, _utcnow, get_session, init_db


ARTIFACT_NAMES = {
    "proof": "proof.pdf",
    "preview_front": "preview_front.png",
    "preview_inner": "preview_inner.png",
    "preview_back": "preview_back.png",
}


def sku_slug(sku: str) -> str:
    slug = slugify(sku)
    if not slug:
        raise ValueError(f"SKU {sku!r} has no filesystem-safe form")
    return slug


def product_dir(sku: str, base_dir: Path | None = None) -> Path:
    path = (base_dir or config.OUT_DIR) / sku_slug(sku)
    path.mkdir(parents=True, exist_ok=True)
    return path


def artifact_path(
    sku: str,
    artifact_type: str,
    base_dir: Path | None = None,
) -> Path:
    filename = ARTIFACT_NAMES[artifact_type]
    return product_dir(sku, base_dir=base_dir) / filename


class SqlDraftStore:
    """Draft payloads in SQLite, one row per SKU."""

    def __init__(self) -> None:
        init_db()

    def load(self, sku: str) -> Optional[str]:
        with get_session() as session:
            draft = session.get(Draft, sku)
            return draft.payload if draft is not None else None

    def save(self, sku: str, payload: str) -> None:
        with get_session() as session:
            draft = session.get(Draft, sku)
            if draft is None:
                draft = Draft(sku=sku, payload=payload)
            else:
                draft.payload = payload
                draft.updated_at = _utcnow()
            session.add(draft)
            session.commit()

    def delete(self, sku: str) -> None:
        with get_session() as session:
            draft = session.get(Draft, sku)
            if draft is not None:
                session.delete(draft)
                session.commit()

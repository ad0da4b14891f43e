from __future__ import annotations

import hashlib
import logging
import re
from pathlib import Path

from slugify import slugify

from . import config

logger = logging.getLogger(__name__)


ARTIFACT_NAMES = {
    "pdf": "document.pdf",
    "preview": "preview.png",
    "error": "error.log",
}


def slug_from_name(name: str) -> str:
    slug = slugify(name)
    slug = re.sub(r"[^a-z0-9-]+", "-", slug.lower()).strip("-")
    if not slug:
        slug = hashlib.md5(name.encode("utf-8")).hexdigest()[:12]
    if ".." in slug or "/" in slug or "\\" in slug:
        raise ValueError("Invalid slug generated from name")
    return slug


def document_dir(slug: str, base_dir: Path | None = None) -> Path:
    root = base_dir or config.OUT_DIR
    path = root / slug
    path.mkdir(parents=True, exist_ok=True)
    return path


def artifact_path(slug: str, artifact_type: str, base_dir: Path | None = None) -> Path:
    filename = ARTIFACT_NAMES[artifact_type]
    return document_dir(slug, base_dir=base_dir) / filename


def write_pdf(slug: str, data: bytes, base_dir: Path | None = None) -> Path:
    """
    Persist a finished document. The bytes land in a temporary file first and
    replace the target in one step, so a reader never sees a partial PDF.
    """
    if not data:
        raise ValueError(f"[{slug}] refusing to write an empty document")
    path = artifact_path(slug, "pdf", base_dir=base_dir)
    temp_path = path.with_name(path.name + ".tmp")
    try:
        temp_path.write_bytes(data)
        temp_path.replace(path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
    logger.info("Wrote %s (%d bytes)", path, len(data))
    return path


def write_error(slug: str, message: str, base_dir: Path | None = None) -> Path:
    error_path = artifact_path(slug, "error", base_dir=base_dir)
    error_path.write_text(message, encoding="utf-8")
    return error_path

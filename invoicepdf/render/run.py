from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, List

from ..models import DocumentSpec, StyleConfig
from ..storage import artifact_path, slug_from_name, write_error, write_pdf
from .invoice import Invoice
from .preview import render_preview

logger = logging.getLogger(__name__)


def _persist(slug: str, pdf: bytes, preview: bool) -> Path:
    pdf_path = write_pdf(slug, pdf)
    if preview:
        render_preview(pdf_path, artifact_path(slug, "preview"))
    return pdf_path


def render_file(spec_path: Path, style: StyleConfig, preview: bool = False) -> Path:
    document = DocumentSpec.from_file(spec_path)
    pdf = Invoice(document, style).generate()
    return _persist(slug_from_name(spec_path.stem), pdf, preview)


async def _render_async(spec_path: Path, style: StyleConfig) -> bytes:
    document = await asyncio.to_thread(DocumentSpec.from_file, spec_path)
    return await Invoice(document, style).agenerate()


async def render_many(spec_paths: List[Path], style: StyleConfig) -> List[bytes | BaseException]:
    # one Invoice (and canvas) per document, so nothing is shared between them
    return await asyncio.gather(
        *(_render_async(path, style) for path in spec_paths),
        return_exceptions=True,
    )


def run_batch(spec_paths: Iterable[Path], style: StyleConfig, preview: bool = False) -> Dict[str, List[str]]:
    paths = list(spec_paths)
    results: Dict[str, List[str]] = {"READY": [], "FAILED": []}
    outcomes = asyncio.run(render_many(paths, style))

    for path, outcome in zip(paths, outcomes):
        slug = slug_from_name(path.stem)
        if isinstance(outcome, Exception):
            logger.error("Rendering failed for %s", slug, exc_info=outcome)
            write_error(slug, f"{type(outcome).__name__}: {outcome}")
            results["FAILED"].append(slug)
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        try:
            _persist(slug, outcome, preview)
        except Exception as exc:
            logger.exception("Saving failed for %s", slug)
            write_error(slug, f"{type(exc).__name__}: {exc}")
            results["FAILED"].append(slug)
            continue
        results["READY"].append(slug)
    return results

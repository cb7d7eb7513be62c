# =============================================================================
# CV Parser — Docling Document Intelligence
# =============================================================================
#
# Extracts plain text from an uploaded CV (PDF) using IBM's Docling library.
#
# We iterate document items in reading order and keep headings, paragraphs
# and list items. Tables and pictures are skipped. The result is one
# newline-separated string for the prompt and the skill scanner.
#
# Docling is synchronous and CPU-heavy. Route handlers call
# extract_cv_text() through asyncio.to_thread().
# =============================================================================

from __future__ import annotations

import logging
from io import BytesIO

from docling.datamodel.base_models import DocumentStream, InputFormat
from docling.datamodel.pipeline_options import PdfPipelineOptions
from docling.document_converter import DocumentConverter, PdfFormatOption
from docling_core.types.doc.labels import DocItemLabel

logger = logging.getLogger(__name__)

_TEXT_LABELS = (
    DocItemLabel.TITLE,
    DocItemLabel.SECTION_HEADER,
    DocItemLabel.TEXT,
    DocItemLabel.LIST_ITEM,
    DocItemLabel.CAPTION,
    DocItemLabel.FOOTNOTE,
)


# ---------------------------------------------------------------------------
# Docling Converter — Lazy Singleton
# ---------------------------------------------------------------------------
# Initialization loads layout models into memory, so one converter is
# reused for every upload.
# ---------------------------------------------------------------------------

_converter: DocumentConverter | None = None


def _get_converter() -> DocumentConverter:
    """Lazily initialize and cache the Docling DocumentConverter."""
    global _converter
    if _converter is None:
        logger.info(
            "Initializing Docling DocumentConverter "
            "(first use, may take a few seconds)..."
        )

        # CVs are born-digital; OCR stays off.
        pipeline_options = PdfPipelineOptions()
        pipeline_options.do_ocr = False
        pipeline_options.do_table_structure = True

        _converter = DocumentConverter(
            format_options={
                InputFormat.PDF: PdfFormatOption(
                    pipeline_options=pipeline_options,
                ),
            }
        )
        logger.info("Docling DocumentConverter initialized")
    return _converter


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_cv_text(data: bytes, filename: str = "cv.pdf") -> str:
    """
    Extract the text of a CV.

    Args:
        data: Raw bytes of the uploaded file.
        filename: Original filename (Docling uses the extension).

    Returns:
        Text items joined by newlines, or "" if the document has no text.

    Raises:
        ValueError: If the upload is empty.
        RuntimeError: If Docling cannot convert the document (corrupt or
            encrypted PDF, unsupported format).
    """
    if not data:
        raise ValueError("File is empty")

    logger.info("Analyzing CV: %s (%d bytes)", filename, len(data))
    converter = _get_converter()

    try:
        result = converter.convert(
            DocumentStream(name=filename, stream=BytesIO(data)),
        )
    except Exception as exc:
        raise RuntimeError(
            f"Could not parse '{filename}': {exc}"
        ) from exc

    lines: list[str] = []
    for item, _level in result.document.iterate_items():
        if getattr(item, "label", None) not in _TEXT_LABELS:
            continue
        text = (getattr(item, "text", "") or "").strip()
        if text:
            lines.append(text)

    text = "\n".join(lines)
    if not text:
        logger.warning("Parsed text is empty for '%s'", filename)
        return ""

    logger.info("CV text length for '%s': %d", filename, len(text))
    return text

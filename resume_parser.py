"""
Résumé document ➜ raw text ➜ ResumeRecord.

PDFs go through pdfplumber and DOCX files through python-docx. If either
library cannot handle the document the raw bytes are decoded as text instead,
so only an input that cannot be read at all raises.
"""

from __future__ import annotations

import io
import logging
import os
import re
import warnings
from pathlib import Path
from typing import List, Optional, Tuple

import pdfplumber
from docx import Document

from resume_models import ResumeRecord
from section_parser import parse

logger = logging.getLogger(__name__)

# silence noisy PDF warnings
warnings.filterwarnings("ignore", category=UserWarning, module="pdfminer")

_CID_RE = re.compile(r"\(cid:\d+\)")
PDF_MAGIC = b"%PDF"

INPUT_REQUIRED_MESSAGE = "Please upload a file or enter resume text."


class ResumeReadError(RuntimeError):
    """Raised when a résumé document cannot be read even as raw bytes."""


class ResumeInputError(ValueError):
    """Raised when neither a document nor pasted text was supplied."""


def _read_document(document) -> Tuple[str, bytes]:
    """Return (file name, bytes) for a path, bytes or file-like object."""
    if isinstance(document, (bytes, bytearray)):
        return "", bytes(document)

    if isinstance(document, (str, os.PathLike)):
        path = Path(document)
        try:
            return path.name, path.read_bytes()
        except OSError as exc:
            raise ResumeReadError(f"Could not read resume file '{path}': {exc}") from exc

    if not hasattr(document, "read"):
        raise ResumeReadError(f"Unsupported resume input: {type(document).__name__}")

    try:
        if hasattr(document, "seekable") and document.seekable():
            document.seek(0)
        data = document.read()
    except OSError as exc:
        raise ResumeReadError(f"Could not read resume upload: {exc}") from exc

    if isinstance(data, str):
        data = data.encode("utf-8")
    name = getattr(document, "name", "") or ""
    return Path(str(name)).name, data


def extract_pages(data: bytes) -> List[str]:
    """Text of every PDF page, in page order."""
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        return [_CID_RE.sub("", page.extract_text() or "") for page in pdf.pages]


def extract_docx_text(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    parts = [para.text for para in doc.paragraphs if para.text]
    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(" | ".join(cells))
    return "\n".join(parts)


def decode_text(data: bytes) -> str:
    return data.decode("utf-8-sig", errors="replace")


def extract_text(document) -> str:
    """
    Extract plain text from a résumé document.

    ``document`` may be a path, raw bytes or a binary/text file object such as
    a Streamlit upload. Extraction failures fall back to decoding the bytes.
    """
    name, data = _read_document(document)
    suffix = Path(name).suffix.lower()
    label = name or "<upload>"

    if suffix == ".pdf" or data.startswith(PDF_MAGIC):
        try:
            return "\n".join(extract_pages(data))
        except Exception as exc:
            logger.warning("PDF extraction failed for %s, reading raw text instead: %s", label, exc)
    elif suffix == ".docx":
        try:
            return extract_docx_text(data)
        except Exception as exc:
            logger.warning("DOCX extraction failed for %s, reading raw text instead: %s", label, exc)

    return decode_text(data)


def load_resume(document=None, text: Optional[str] = None) -> ResumeRecord:
    """
    Build a ResumeRecord from pasted text or an uploaded document.

    Pasted text wins when both are given. Raises ResumeInputError when there
    is nothing to parse.
    """
    if text and text.strip():
        raw = text
    elif document is not None:
        raw = extract_text(document)
    else:
        raise ResumeInputError(INPUT_REQUIRED_MESSAGE)

    record = parse(raw.strip())
    logger.info(
        "Parsed resume: %d skills, %d education, %d experience, %d projects, %d certifications",
        len(record.skills), len(record.education), len(record.experience),
        len(record.projects), len(record.certifications),
    )
    return record

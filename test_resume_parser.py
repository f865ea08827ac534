"""Tests for document text extraction and résumé loading."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from docx import Document

import resume_parser
from resume_parser import (
    INPUT_REQUIRED_MESSAGE,
    ResumeInputError,
    ResumeReadError,
    extract_text,
    load_resume,
)


class FakePage:
    def __init__(self, text):
        self._text = text

    def extract_text(self):
        return self._text


class FakePDF:
    def __init__(self, pages):
        self.pages = [FakePage(t) for t in pages]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def test_plain_text_file(tmp_path: Path):
    path = tmp_path / "resume.txt"
    path.write_text("SKILLS\nPython, SQL\n", encoding="utf-8")
    assert extract_text(path) == "SKILLS\nPython, SQL\n"
    assert extract_text(str(path)) == "SKILLS\nPython, SQL\n"


def test_bytes_and_file_objects():
    assert extract_text(b"SKILLS\nGo") == "SKILLS\nGo"
    assert extract_text(io.BytesIO(b"SKILLS\nGo")) == "SKILLS\nGo"
    assert extract_text(io.StringIO("SKILLS\nGo")) == "SKILLS\nGo"


def test_pdf_pages_joined_in_order(monkeypatch):
    monkeypatch.setattr(
        resume_parser.pdfplumber, "open", lambda stream: FakePDF(["Page one (cid:3)text", None, "Page three"])
    )
    assert extract_text(b"%PDF-1.7 fake") == "Page one text\n\nPage three"


def test_pdf_failure_falls_back_to_raw_text(monkeypatch):
    def broken(stream):
        raise ValueError("not a real PDF")

    monkeypatch.setattr(resume_parser.pdfplumber, "open", broken)
    text = extract_text(b"%PDF-1.4\nSKILLS\nPython")
    assert "SKILLS\nPython" in text


def test_pdf_detected_by_suffix(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(resume_parser.pdfplumber, "open", lambda stream: FakePDF(["from pdf"]))
    path = tmp_path / "resume.pdf"
    path.write_bytes(b"whatever")
    assert extract_text(path) == "from pdf"


def test_docx_document(tmp_path: Path):
    doc = Document()
    doc.add_paragraph("SKILLS")
    doc.add_paragraph("Python, SQL")
    path = tmp_path / "resume.docx"
    doc.save(str(path))

    assert extract_text(path) == "SKILLS\nPython, SQL"
    assert load_resume(path).skills == ("Python", "SQL")


def test_corrupt_docx_falls_back_to_raw_text(tmp_path: Path):
    path = tmp_path / "resume.docx"
    path.write_bytes(b"SKILLS\nRust")
    assert extract_text(path) == "SKILLS\nRust"


def test_unreadable_inputs_raise(tmp_path: Path):
    with pytest.raises(ResumeReadError):
        extract_text(tmp_path / "missing.pdf")
    with pytest.raises(ResumeReadError):
        extract_text(42)


def test_load_resume_requires_input():
    with pytest.raises(ResumeInputError, match=INPUT_REQUIRED_MESSAGE):
        load_resume()
    with pytest.raises(ResumeInputError):
        load_resume(document=None, text="   ")


def test_load_resume_prefers_pasted_text():
    record = load_resume(document=b"SKILLS\nCobol", text="SKILLS\nPython, SQL\n")
    assert record.skills == ("Python", "SQL")
    assert record.raw_text == "SKILLS\nPython, SQL"


def test_load_resume_from_document():
    record = load_resume(document=io.BytesIO(b"EXPERIENCE\n2019-2022 Acme Corp\n- Built APIs\n"))
    assert record.experience[0].achievements == ("Built APIs",)

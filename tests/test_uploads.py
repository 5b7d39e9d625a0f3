from __future__ import annotations

import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from churchsite.errors import AttachmentTooLarge, UnsupportedMediaType
from churchsite.uploads import read_image_upload, read_pdf_upload


def _upload(data: bytes, filename: str, content_type: str) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def test_missing_or_blank_upload_is_no_file():
    assert read_pdf_upload(None, limit_bytes=10) is None
    assert read_pdf_upload(_upload(b"", "", "application/octet-stream"), limit_bytes=10) is None


def test_pdf_upload_becomes_attachment():
    attachment = read_pdf_upload(
        _upload(b"%PDF-1.7", "notes.pdf", "application/pdf"), limit_bytes=1024
    )

    assert attachment.filename == "notes.pdf"
    assert attachment.content_type == "application/pdf"
    assert attachment.size == 8
    assert attachment.data == b"%PDF-1.7"


def test_pdf_upload_rejects_other_types():
    with pytest.raises(UnsupportedMediaType, match="Only PDF files are allowed"):
        read_pdf_upload(_upload(b"GIF89a", "cat.gif", "image/gif"), limit_bytes=1024)


def test_upload_over_the_limit_is_rejected():
    with pytest.raises(AttachmentTooLarge) as excinfo:
        read_image_upload(
            _upload(b"x" * 11, "big.png", "image/png"), limit_bytes=10
        )
    assert excinfo.value.limit_bytes == 10


def test_upload_exactly_at_the_limit_is_accepted():
    attachment = read_image_upload(_upload(b"x" * 10, "ok.png", "image/png"), limit_bytes=10)

    assert attachment.size == 10


def test_too_large_message_names_the_limit_in_megabytes():
    assert str(AttachmentTooLarge(10 * 1024 * 1024)) == "File too large. Maximum size is 10MB."


def test_image_upload_rejects_pdf():
    with pytest.raises(UnsupportedMediaType, match="Only image files are allowed"):
        read_image_upload(_upload(b"%PDF", "x.pdf", "application/pdf"), limit_bytes=1024)

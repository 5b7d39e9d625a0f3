"""Turn multipart uploads into :class:`~churchsite.records.Attachment` values."""

from __future__ import annotations

from fastapi import UploadFile

from .errors import AttachmentTooLarge, UnsupportedMediaType
from .records import Attachment


def _is_pdf(content_type: str) -> bool:
    return content_type == "application/pdf"


def _is_image(content_type: str) -> bool:
    return content_type.startswith("image/")


def read_upload(
    upload: UploadFile | None,
    *,
    limit_bytes: int,
    accepts,
    rejection: str,
) -> Attachment | None:
    """Return the uploaded file as an attachment, or ``None`` when none was sent.

    Browsers submit an empty part with no filename when the file input is left
    blank, so that case counts as "no file".
    """
    if upload is None or not upload.filename:
        return None
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    if not accepts(content_type):
        raise UnsupportedMediaType(rejection)
    data = upload.file.read(limit_bytes + 1)
    if len(data) > limit_bytes:
        raise AttachmentTooLarge(limit_bytes)
    return Attachment.from_bytes(data, content_type=content_type, filename=upload.filename)


def read_pdf_upload(upload: UploadFile | None, *, limit_bytes: int) -> Attachment | None:
    return read_upload(
        upload,
        limit_bytes=limit_bytes,
        accepts=_is_pdf,
        rejection="Only PDF files are allowed",
    )


def read_image_upload(upload: UploadFile | None, *, limit_bytes: int) -> Attachment | None:
    return read_upload(
        upload,
        limit_bytes=limit_bytes,
        accepts=_is_image,
        rejection="Only image files are allowed",
    )

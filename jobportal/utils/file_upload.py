"""
File Upload Utility - resumes and chapter logos.

Three uses:
- save_resume(): store an uploaded resume under settings.upload_dir
- save_image(): store an uploaded image under settings.upload_dir/images
- extract_text_from_file(): pull plain text out of a resume for scoring

Supported resume formats:
- PDF (.pdf) using PyPDF2
- Word (.docx) using python-docx
- Plain Text (.txt)
"""

import io
import logging
import uuid
from pathlib import Path
from typing import Collection, Tuple

from docx import Document
from fastapi import UploadFile
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from jobportal.core.config import get_settings
from jobportal.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.pdf', '.docx', '.txt'}
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def has_upload(file) -> bool:
    """Multipart clients send an empty part for an unset file field."""
    return file is not None and bool(file.filename)


async def read_upload(file: UploadFile, allowed: Collection[str] = ALLOWED_EXTENSIONS) -> Tuple[bytes, str]:
    """
    Validate name, extension and size of an upload and return its bytes.

    Returns:
        Tuple of (content, extension)

    Raises:
        ValidationError on missing name, unsupported type, empty or oversized file
    """
    max_mb = get_settings().max_upload_mb

    if not file.filename:
        raise ValidationError("No file uploaded")

    ext = get_file_extension(file.filename)
    if ext not in allowed:
        names = ", ".join(e.lstrip('.').upper() for e in sorted(allowed))
        raise ValidationError(f"Unsupported file type '{ext}'. Allowed: {names}")

    content = await file.read()
    if not content:
        raise ValidationError("Uploaded file is empty")
    if len(content) > max_mb * 1024 * 1024:
        raise ValidationError(f"File too large. Maximum size: {max_mb}MB")

    return content, ext


def store_upload(content: bytes, ext: str, prefix: str, subdir: str = "") -> str:
    """Write validated bytes under upload_dir and return the public /uploads path."""
    target = Path(get_settings().upload_dir)
    if subdir:
        target = target / subdir
    target.mkdir(parents=True, exist_ok=True)

    stored_name = f"{prefix}-{uuid.uuid4().hex}{ext}"
    (target / stored_name).write_bytes(content)

    public = f"/uploads/{subdir}/{stored_name}" if subdir else f"/uploads/{stored_name}"
    logger.info("Stored upload %s", public)
    return public


async def save_resume(file: UploadFile, user_id: int) -> str:
    """Store the upload and return its public path (/uploads/<name>)."""
    content, ext = await read_upload(file)
    return store_upload(content, ext, f"resume-{user_id}")


async def save_image(file: UploadFile, prefix: str) -> str:
    """Store an image upload and return its public path (/uploads/images/<name>)."""
    content, ext = await read_upload(file, IMAGE_EXTENSIONS)
    return store_upload(content, ext, prefix, subdir="images")


async def extract_text_from_file(file: UploadFile) -> Tuple[str, str]:
    """
    Extract text from uploaded file.

    Returns:
        Tuple of (extracted_text, filename)
    """
    content, ext = await read_upload(file)

    if ext == '.pdf':
        text = extract_from_pdf(content)
    elif ext == '.docx':
        text = extract_from_docx(content)
    else:  # .txt
        text = extract_from_txt(content)

    if not text.strip():
        raise ValidationError("Could not extract text from file. File may be empty or corrupted.")

    return text, file.filename


def extract_from_pdf(content: bytes) -> str:
    """Extract text from PDF bytes."""
    try:
        reader = PdfReader(io.BytesIO(content))
        text_parts = []
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
        return '\n'.join(text_parts)
    except PdfReadError as e:
        raise ValidationError(f"Error reading PDF: {e}")


def extract_from_docx(content: bytes) -> str:
    """Extract text from DOCX bytes (paragraphs, then table rows)."""
    try:
        doc = Document(io.BytesIO(content))
    except Exception as e:
        # python-docx surfaces zip/xml errors of several kinds for bad files
        raise ValidationError(f"Error reading DOCX: {e}")

    text_parts = [para.text for para in doc.paragraphs if para.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            row_text = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if row_text:
                text_parts.append(' | '.join(row_text))

    return '\n'.join(text_parts)


def extract_from_txt(content: bytes) -> str:
    """Extract text from TXT bytes."""
    for encoding in ['utf-8', 'cp1252']:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    return content.decode('latin-1')

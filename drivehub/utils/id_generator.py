"""
Short URL-safe identifiers for bookings and stored files
"""
import secrets
import time
from pathlib import Path
from typing import Optional

TOKEN_BYTES = 6  # 8 URL-safe characters

# Only extensions the static server maps to a raster image type
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".heic", ".heif"}

CONTENT_TYPE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/pjpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/heic": ".heic",
    "image/heif": ".heif",
}


def generate_token() -> str:
    """Generate a short random URL-safe token"""
    return secrets.token_urlsafe(TOKEN_BYTES)


def generate_booking_id(prefix: str = "DH") -> str:
    """Generate a booking id, e.g. DH-x3Fq9_Ab"""
    return f"{prefix}-{generate_token()}"


def image_extension(original_filename: Optional[str], content_type: Optional[str] = None) -> str:
    """
    Pick the extension for a stored image.

    The original extension is kept when it is a known image extension,
    otherwise it is derived from the content type. Anything else (svg, html,
    unknown subtypes) gets no extension and is served as text/plain.
    """
    ext = Path(original_filename).suffix.lower() if original_filename else ""
    if ext in IMAGE_EXTENSIONS:
        return ext

    mime = (content_type or "").split(";", 1)[0].strip().lower()
    return CONTENT_TYPE_EXTENSIONS.get(mime, "")


def generate_stored_name(original_filename: Optional[str], content_type: Optional[str] = None) -> str:
    """
    Build a collision-resistant filename for an uploaded file.

    Format: <epoch millis>-<token><ext>
    """
    return f"{int(time.time() * 1000)}-{generate_token()}{image_extension(original_filename, content_type)}"

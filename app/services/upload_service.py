"""
Poster upload handling
"""

import os
import uuid

from app.core.config import settings
from app.services.errors import InvalidArgument

ALLOWED_POSTER_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.webp')

class UploadService:
    """Stores uploaded event posters under the static uploads directory"""

    @staticmethod
    def save_poster(file_content: bytes, filename: str) -> str:
        """Save poster bytes and return the public URL path"""
        extension = os.path.splitext(filename or "")[1].lower()
        if extension not in ALLOWED_POSTER_EXTENSIONS:
            raise InvalidArgument(
                f"Invalid poster format. Allowed: {', '.join(ALLOWED_POSTER_EXTENSIONS)}"
            )
        if not file_content:
            raise InvalidArgument("Poster file is empty")
        if len(file_content) > settings.MAX_UPLOAD_SIZE:
            raise InvalidArgument(f"Poster exceeds {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB limit")

        poster_dir = os.path.join(settings.UPLOAD_DIR, "posters")
        os.makedirs(poster_dir, exist_ok=True)

        stored_name = f"{uuid.uuid4().hex}{extension}"
        with open(os.path.join(poster_dir, stored_name), 'wb') as f:
            f.write(file_content)

        return f"/uploads/posters/{stored_name}"

"""
Media host helpers: request files are written to a temporary directory and
handed to Cloudinary, which returns the public URL.
"""
from __future__ import annotations

import logging
import os
import uuid

import cloudinary
import cloudinary.uploader
from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


def configure_media_host(app) -> None:
    cloudinary.config(
        cloud_name=app.config.get("CLOUDINARY_CLOUD_NAME"),
        api_key=app.config.get("CLOUDINARY_API_KEY"),
        api_secret=app.config.get("CLOUDINARY_API_SECRET"),
        secure=True,
    )


def _remove(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def save_temp_file(file: FileStorage) -> str:
    """Persist an uploaded file under UPLOAD_TMP_DIR and return its path."""
    tmp_dir = current_app.config["UPLOAD_TMP_DIR"]
    os.makedirs(tmp_dir, exist_ok=True)
    name = secure_filename(file.filename or "") or "upload"
    path = os.path.join(tmp_dir, f"{uuid.uuid4().hex}-{name}")
    file.save(path)
    return path


def upload_to_media_host(local_path: str | None) -> str | None:
    """
    Upload a local file and return its public URL, or None on failure.
    The local file is removed in both cases.
    """
    if not local_path:
        return None
    try:
        response = cloudinary.uploader.upload(local_path, resource_type="auto")
    except Exception:
        # failures surface to callers as a missing URL
        logger.exception("Upload of %s to media host failed", local_path)
        return None
    finally:
        _remove(local_path)

    url = response.get("secure_url") or response.get("url")
    if url:
        logger.info("File uploaded to %s", url)
    else:
        logger.error("Media host returned no URL for %s", local_path)
    return url


def upload_request_file(file: FileStorage | None) -> str | None:
    """Save a request file locally and push it to the media host."""
    if file is None or not file.filename:
        return None
    return upload_to_media_host(save_temp_file(file))

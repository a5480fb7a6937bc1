"""Coach portrait uploads stored on local disk."""
from __future__ import annotations

import os
import re
import secrets
import time
from http import HTTPStatus
from pathlib import Path
from urllib.parse import quote

from flask import current_app, request, send_from_directory
from flask.typing import ResponseReturnValue
from werkzeug.utils import secure_filename

from academy_gateway.app.api.relay import error_response, json_response
from academy_gateway.app.services.identity import extract_provider_id

from . import api_bp

MIME_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "image/gif": ".gif",
}
IMAGE_SUFFIX = re.compile(r"\.(png|jpe?g|webp|gif)$", re.IGNORECASE)
ONE_YEAR = 60 * 60 * 24 * 365


def coach_upload_dir() -> Path:
    return Path(current_app.config["UPLOAD_FOLDER"]) / "coach"


def _stored_name(wanted: str, mimetype: str) -> str:
    suffix = MIME_EXTENSIONS.get(mimetype)
    if suffix is None:
        match = IMAGE_SUFFIX.search(wanted)
        suffix = match.group(0).lower() if match else ".png"
    base = IMAGE_SUFFIX.sub("", secure_filename(wanted)) or "coach"
    return f"{base}-{int(time.time() * 1000)}-{secrets.token_hex(6)}{suffix}"


@api_bp.post("/uploads/coach")
def upload_coach_image() -> ResponseReturnValue:
    """Store an uploaded coach image and return its public URL."""

    if not extract_provider_id(request.cookies):
        return error_response("Unauthorized", HTTPStatus.UNAUTHORIZED)

    upload = request.files.get("file")
    if upload is None or not upload.filename:
        return error_response("no file", HTTPStatus.BAD_REQUEST)

    wanted = (request.form.get("filename") or upload.filename or "").strip()
    filename = _stored_name(wanted, upload.mimetype or "")
    directory = coach_upload_dir()
    directory.mkdir(parents=True, exist_ok=True)
    upload.save(directory / filename)
    current_app.logger.info("Stored coach image %s", filename)

    return json_response(
        {
            "ok": True,
            "filename": filename,
            "url": f"/api/uploads/coach/{quote(filename)}",
        }
    )


@api_bp.get("/uploads/coach/<path:filename>")
def coach_image(filename: str) -> ResponseReturnValue:
    """Serve a previously uploaded coach image."""

    if ".." in filename or filename.startswith("/") or os.path.isabs(filename):
        return error_response("Invalid filename", HTTPStatus.BAD_REQUEST)
    if not (coach_upload_dir() / filename).is_file():
        return error_response("Not found", HTTPStatus.NOT_FOUND)

    response = send_from_directory(coach_upload_dir(), filename, max_age=ONE_YEAR)
    response.headers["Cache-Control"] = f"public, max-age={ONE_YEAR}, immutable"
    return response

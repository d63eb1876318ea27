# mazegen_lib/api/images.py
import logging
from io import BytesIO

from flask import Blueprint, Response, current_app, jsonify, request
from PIL import Image, UnidentifiedImageError

from mazegen_lib.errors import ImageNotFound

bp = Blueprint("images", __name__)
log = logging.getLogger("mazegen.api")


def format_file_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


@bp.route("/", methods=["POST"])
def upload_image():
    """Stores an uploaded image and returns its handle."""
    file = request.files.get("file")
    if file is None or not file.filename:
        return jsonify({"error": "Please select a file to upload"}), 400

    data = file.read()
    if not data:
        return jsonify({"error": "Please select a file to upload"}), 400

    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        log.warning("Rejected upload '%s': %s", file.filename, e)
        return jsonify({"error": "Uploaded file is not a supported image"}), 400

    image_id = current_app.image_store.store(data, file.filename)
    return (
        jsonify(
            {
                "success": True,
                "message": "Image uploaded successfully",
                "image_id": image_id,
                "filename": file.filename,
                "size": format_file_size(len(data)),
            }
        ),
        201,
    )


@bp.route("/<image_id>", methods=["GET"])
def get_image(image_id):
    """Returns the raw bytes of a stored image."""
    try:
        data = current_app.image_store.fetch(image_id)
    except ImageNotFound as e:
        return jsonify({"error": e.message}), 404
    return Response(data, mimetype="application/octet-stream")

# mazegen_lib/api/maze.py
import logging

from flask import Blueprint, Response, current_app, jsonify, request

from mazegen_lib import errors

bp = Blueprint("maze", __name__)
log = logging.getLogger("mazegen.api")

STATUS_BY_KIND = {
    errors.ImageNotFound.kind: 404,
    errors.InvalidDimensions.kind: 400,
    errors.SizeExceeded.kind: 400,
    errors.DecodeError.kind: 400,
    errors.InsufficientMemory.kind: 503,
    errors.ResourceExhausted.kind: 503,
}


def _parse_int(value, name):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"'{name}' must be an integer") from None


def _optional_int(value, name):
    return None if value in (None, "") else _parse_int(value, name)


@bp.route("/generate", methods=["POST"])
def generate_maze():
    """Generates a maze from a stored image and returns it with its metadata."""
    data = request.get_json(silent=True)
    if not data or not data.get("image_id"):
        return jsonify({"error": "Missing 'image_id' in request"}), 400

    try:
        width = _parse_int(data.get("width"), "width")
        height = _parse_int(data.get("height"), "height")
        seed = _optional_int(data.get("seed"), "seed")
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    result = current_app.maze_generator.generate(data["image_id"], width, height, seed=seed)
    status = 200 if result.success else STATUS_BY_KIND.get(result.error_kind, 500)
    return jsonify(result.to_dict()), status


@bp.route("/download/<image_id>", methods=["GET"])
def download_maze(image_id):
    """Generates a maze and returns it as a plain text attachment."""
    try:
        width = _parse_int(request.args.get("width"), "width")
        height = _parse_int(request.args.get("height"), "height")
        seed = _optional_int(request.args.get("seed"), "seed")
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    result = current_app.maze_generator.generate(image_id, width, height, seed=seed)
    if not result.success:
        log.warning("Download of %s failed: %s", image_id, result.message)
        return jsonify(result.to_dict()), STATUS_BY_KIND.get(result.error_kind, 500)

    filename = f"maze_{width}x{height}.txt"
    return Response(
        result.maze,
        mimetype="text/plain; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )

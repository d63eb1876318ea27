# mazegen_lib/api/debug.py
import logging

from flask import Blueprint, Response, current_app, jsonify, request

from mazegen_lib.analysis import sampler
from mazegen_lib.errors import MazeGenerationError
from mazegen_lib.rendering.edge_preview import edge_png

bp = Blueprint("debug", __name__)
log = logging.getLogger("mazegen.api")


@bp.route("/edges/<image_id>", methods=["GET"])
def debug_edges(image_id):
    """Visualizes the edge mask of a stored image as a scaled-up PNG."""
    width = request.args.get("width", default=50, type=int)
    height = request.args.get("height", default=50, type=int)

    generator = current_app.maze_generator
    try:
        generator.validate_dimensions(width, height)
        detection = generator.detect_edges(image_id, width, height)
    except MazeGenerationError as e:
        status = 404 if e.kind == "ImageNotFound" else 400
        return jsonify({"error": e.message, "error_kind": e.kind}), status

    log.debug(
        "Edge preview for %s: tier '%s', %d cells.",
        image_id,
        detection.tier,
        detection.edge_count,
    )
    return Response(
        edge_png(detection.mask),
        mimetype="image/png",
        headers={"X-Edge-Tier": detection.tier, "X-Edge-Count": str(detection.edge_count)},
    )


# Square grid sizes tried when analyzing an image.
ANALYSIS_SIZES = (20, 30, 50, 80)


def _edge_test(generator, image_id, size):
    try:
        detection = generator.detect_edges(image_id, size, size)
    except MazeGenerationError as e:
        return {"size": size, "error": e.message}
    return {
        "size": size,
        "tier": detection.tier,
        "edge_count": detection.edge_count,
        "edge_percentage": round(detection.density * 100, 1),
    }


def recommendations(brightness):
    """Hints for picking a better source image, based on its brightness."""
    tips = []
    if brightness["contrast"] < 30:
        tips.append("Image has very low contrast. Consider using a higher contrast image.")
    if brightness["mean"] < 50 or brightness["mean"] > 200:
        tips.append("Image is very dark or very bright. Try an image with more varied lighting.")
    tips.append("For best results, use images with clear objects, shapes, or text.")
    tips.append("Try different maze sizes to see which works best with your image.")
    return tips


@bp.route("/analyze/<image_id>", methods=["GET"])
def analyze_image(image_id):
    """Reports source characteristics and edge yield of a stored image."""
    try:
        report = sampler.analyze(current_app.image_store.fetch(image_id))
    except MazeGenerationError as e:
        status = 404 if e.kind == "ImageNotFound" else 400
        return jsonify({"error": e.message, "error_kind": e.kind}), status

    generator = current_app.maze_generator
    report["image_id"] = image_id
    report["edge_tests"] = [_edge_test(generator, image_id, size) for size in ANALYSIS_SIZES]
    report["recommendations"] = recommendations(report["brightness"])
    log.info(
        "Analyzed image %s: contrast %d, mean brightness %.1f.",
        image_id,
        report["brightness"]["contrast"],
        report["brightness"]["mean"],
    )
    return jsonify(report)

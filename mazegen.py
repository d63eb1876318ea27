# --- mazegen.py ---
import argparse
import logging
import random
import sys

from mazegen_lib import schema
from mazegen_lib.errors import MazeGenerationError
from mazegen_lib.generator import MazeGenerator
from mazegen_lib.log_utils import setup_logging
from mazegen_lib.rendering.edge_preview import edge_png
from mazegen_lib.services.image_store import ImageStore


def write_outputs(result: schema.GenerationResult, output_name: str):
    """Writes the maze text and its JSON metadata sidecar."""
    log = logging.getLogger("mazegen.main")
    text_path = f"{output_name}.txt"
    json_path = f"{output_name}.json"
    try:
        with open(text_path, "w", encoding="utf-8") as f:
            f.write(result.maze)
        schema.save_json(result, json_path)
        log.info("Saved maze to '%s' and metadata to '%s'", text_path, json_path)
    except IOError as e:
        log.error("Could not write maze output: %s", e)
        return False
    return True


def save_edge_preview(generator: MazeGenerator, image_id: str, args) -> None:
    """Writes the edge mask preview used to guide the solution path."""
    log = logging.getLogger("mazegen.main")
    output_path = f"{args.output}_edges.png"
    try:
        rng = random.Random(args.seed) if args.seed is not None else None
        detection = generator.detect_edges(image_id, args.width, args.height, rng)
        with open(output_path, "wb") as f:
            f.write(edge_png(detection.mask))
        log.info("Saved '%s' edge preview to '%s'", detection.tier, output_path)
    except (IOError, MazeGenerationError) as e:
        log.error("Could not save edge preview: %s", e)


def get_cli_args():
    """Configures and parses command-line arguments."""
    p = argparse.ArgumentParser(
        description="Turns a raster image into a text maze whose solution traces its contours."
    )
    p.add_argument("-i", "--input", required=True, help="Path to the input image file.")
    p.add_argument(
        "-o", "--output", required=True, help="Base name for output files."
    )
    p.add_argument(
        "-W", "--width", type=int, default=50, help="Maze width in cells (default: 50)."
    )
    p.add_argument(
        "-H", "--height", type=int, default=50, help="Maze height in cells (default: 50)."
    )
    p.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for reproducible mazes. The same seed and image give the same maze.",
    )
    # Logging arguments
    g_log = p.add_argument_group("Logging & Output")
    g_log.add_argument(
        "-v", "--verbose", action="store_true", help="Enable INFO logging."
    )
    g_log.add_argument(
        "--save-edges",
        action="store_true",
        help="Save the detected edge mask as <output>_edges.png.",
    )
    g_log.add_argument(
        "--print",
        action="store_true",
        dest="print_maze",
        help="Print the generated maze to stdout.",
    )
    g_log.add_argument(
        "--color-logs", action="store_true", help="Enable colored logging."
    )
    g_log.add_argument(
        "--log-file", metavar="FILE", help="Redirect log output to a file."
    )
    g_log.add_argument(
        "-d",
        "--debug",
        nargs="?",
        const="all",
        dest="debug_topics",
        metavar="TOPICS",
        help="Enable DEBUG logging (all,sample,edges,topology,path,render,generate).",
    )
    return p.parse_args()


def main():
    """Main entry point for the mazegen CLI."""
    args = get_cli_args()
    log_level = logging.INFO if args.verbose else logging.WARNING
    if args.debug_topics:
        log_level = logging.DEBUG

    setup_logging(log_level, args.color_logs, args.debug_topics, args.log_file)
    log = logging.getLogger("mazegen.main")

    log.info("--- MAZEGEN CLI Initialized ---")
    log.debug("Arguments received: %s", vars(args))

    try:
        with open(args.input, "rb") as f:
            image_data = f.read()
    except IOError as e:
        log.critical("Could not read input image '%s': %s", args.input, e)
        return 1

    store = ImageStore()
    try:
        image_id = store.store(image_data, args.input)
    except ValueError as e:
        log.critical("Input image '%s' is empty: %s", args.input, e)
        return 1

    generator = MazeGenerator(store)
    result = generator.generate(image_id, args.width, args.height, seed=args.seed)
    if not result.success:
        log.critical("%s: %s", result.error_kind, result.message)
        return 1

    log.info("--- Generation Results ---")
    log.info(
        "Maze %dx%d, %d edge cells, solution %d cells, difficulty %s.",
        result.metadata.width,
        result.metadata.height,
        result.metadata.imagePathLength,
        result.metadata.solutionPathLength,
        result.metadata.difficulty,
    )
    if args.print_maze:
        print(result.maze)

    if args.save_edges:
        save_edge_preview(generator, image_id, args)

    if not write_outputs(result, args.output):
        return 1
    log.info("--- Processing complete. ---")
    return 0


if __name__ == "__main__":
    sys.exit(main())

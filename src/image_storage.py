"""Writes decoded images to disk for the Gemini image MCP server"""

import base64
import logging
import os
import time

logger = logging.getLogger(__name__)


def ensure_dir(path):
    """Return the absolute form of path, creating it (and parents) if missing"""
    resolved = os.path.abspath(path)
    os.makedirs(resolved, exist_ok=True)
    return resolved


def save_image(base64_data, output_dir, index):
    """Decode base64 image data into image-<millis>-<index>.png and return its absolute path.

    Never overwrites: if the name is taken (another call in the same
    millisecond), the timestamp is bumped until an unused name is found.
    """
    directory = ensure_dir(output_dir)
    image_bytes = base64.b64decode(base64_data)
    timestamp = int(time.time() * 1000)

    while True:
        filepath = os.path.join(directory, f"image-{timestamp}-{index}.png")
        try:
            with open(filepath, 'xb') as f:
                f.write(image_bytes)
            break
        except FileExistsError:
            timestamp += 1

    logger.debug("Saved image %d to %s", index, filepath)
    return filepath

"""
generate_image / edit_image tool handlers.

Each handler takes the shared GeminiClient (or anything with the same
generate_content method) plus a parsed request, and always returns a
CallToolResult: failures are reported in-band with isError=True.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from mcp.types import CallToolResult, ImageContent, TextContent

from gemini_client import ImagePart, TextPart, build_edit_parts, build_generate_parts, get_mime_type
from image_storage import save_image

logger = logging.getLogger(__name__)

# Model endpoints by alias
MODELS = {
    "flash": "gemini-2.5-flash-image",
    "pro": "gemini-3-pro-image-preview",
}

# (width, height) per size alias
IMAGE_SIZES = {
    "1K": (1024, 1024),
    "2K": (2048, 2048),
    "4K": (4096, 4096),
}

ASPECT_RATIOS = ("1:1", "16:9", "9:16", "3:4", "4:3")

DEFAULT_MODEL = "flash"
DEFAULT_ASPECT_RATIO = "1:1"
DEFAULT_IMAGE_SIZE = "1K"
DEFAULT_OUTPUT_DIR = "./generated-images"

NO_IMAGE_GENERATED = (
    "No image was generated. The model may not have produced an image for this prompt. "
    "Try rephrasing your prompt."
)
NO_IMAGE_EDITED = (
    "No edited image was generated. The model may not have been able to edit the image "
    "with the given instructions. Try different instructions."
)


def model_label(model):
    return "Nano Banana Pro" if model == "pro" else "Nano Banana"


def _choice(arguments, key, choices, default):
    value = arguments.get(key)
    if value is None:
        return default
    if value not in choices:
        raise ValueError(f"Invalid {key} '{value}'. Expected one of: {', '.join(choices)}")
    return value


def _required_string(arguments, key):
    value = arguments.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"'{key}' is required")
    return value


@dataclass(frozen=True)
class GenerateRequest:
    prompt: str
    model: str = DEFAULT_MODEL
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    image_size: str = DEFAULT_IMAGE_SIZE
    output_dir: str = DEFAULT_OUTPUT_DIR

    @classmethod
    def from_arguments(cls, arguments):
        return cls(
            prompt=_required_string(arguments, "prompt"),
            model=_choice(arguments, "model", tuple(MODELS), DEFAULT_MODEL),
            aspect_ratio=_choice(arguments, "aspectRatio", ASPECT_RATIOS, DEFAULT_ASPECT_RATIO),
            image_size=_choice(arguments, "imageSize", tuple(IMAGE_SIZES), DEFAULT_IMAGE_SIZE),
            output_dir=arguments.get("outputDir") or DEFAULT_OUTPUT_DIR,
        )


@dataclass(frozen=True)
class EditRequest:
    prompt: str
    image_path: str
    model: str = DEFAULT_MODEL
    aspect_ratio: Optional[str] = None
    output_dir: str = DEFAULT_OUTPUT_DIR

    @classmethod
    def from_arguments(cls, arguments):
        return cls(
            prompt=_required_string(arguments, "prompt"),
            image_path=_required_string(arguments, "imagePath"),
            model=_choice(arguments, "model", tuple(MODELS), DEFAULT_MODEL),
            aspect_ratio=_choice(arguments, "aspectRatio", ASPECT_RATIOS, None),
            output_dir=arguments.get("outputDir") or DEFAULT_OUTPUT_DIR,
        )


# --- Result helpers ---
def text_result(text, is_error=False):
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def error_result(prefix, exc):
    message = str(exc) or "Unknown error occurred"
    return text_result(f"{prefix}: {message}", is_error=True)


def build_result(summary, images):
    """Summary text first, then every image inline"""
    content = [TextContent(type="text", text=summary)]
    for image in images:
        content.append(ImageContent(type="image", data=image.data, mimeType=image.mime_type))
    return CallToolResult(content=content, isError=False)


def _save_images(parts, output_dir):
    """Persist image parts in order; only images consume an index"""
    images = [part for part in parts if isinstance(part, ImagePart)]
    saved_paths = [save_image(image.data, output_dir, index) for index, image in enumerate(images)]
    return images, saved_paths


def _model_text(parts):
    texts = [part.text for part in parts if isinstance(part, TextPart)]
    if not texts:
        return []
    return ["\nModel response: " + "\n".join(texts)]


# --- Handlers ---
def generate_image(client, arguments):
    """Generate images from a text prompt"""
    try:
        request = GenerateRequest.from_arguments(arguments)
        model_id = MODELS[request.model]
        width, height = IMAGE_SIZES[request.image_size]

        # 1:1 is the model default and is left out of the request
        aspect_ratio = request.aspect_ratio if request.aspect_ratio != DEFAULT_ASPECT_RATIO else None
        parts = client.generate_content(model_id, build_generate_parts(request.prompt), aspect_ratio)

        if not parts:
            return text_result(NO_IMAGE_GENERATED)

        images, saved_paths = _save_images(parts, request.output_dir)

        summary = "\n".join([
            f"Generated {len(images)} image(s) using {model_label(request.model)} ({model_id})",
            f"Aspect ratio: {request.aspect_ratio} | Size: {request.image_size} ({width}x{height})",
            *[f"Saved: {path}" for path in saved_paths],
            *_model_text(parts),
        ])
        return build_result(summary, images)
    except Exception as e:
        logger.exception("generate_image failed")
        return error_result("Error generating image", e)


def edit_image(client, arguments):
    """Edit an existing image file with text instructions"""
    try:
        request = EditRequest.from_arguments(arguments)
        resolved_path = os.path.abspath(request.image_path)
        if not os.path.isfile(resolved_path):
            return text_result(f"Error: Image file not found at {resolved_path}", is_error=True)

        with open(resolved_path, 'rb') as f:
            image_bytes = f.read()

        model_id = MODELS[request.model]
        parts = client.generate_content(
            model_id,
            build_edit_parts(request.prompt, image_bytes, get_mime_type(resolved_path)),
            request.aspect_ratio,
        )

        images, saved_paths = _save_images(parts, request.output_dir)
        if not saved_paths:
            return text_result(NO_IMAGE_EDITED)

        summary = "\n".join([
            f"Edited image using {model_label(request.model)} ({model_id})",
            f"Source: {resolved_path}",
            *[f"Saved: {path}" for path in saved_paths],
            *_model_text(parts),
        ])
        return build_result(summary, images)
    except Exception as e:
        logger.exception("edit_image failed")
        return error_result("Error editing image", e)

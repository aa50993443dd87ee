#!/usr/bin/env python3
"""
GEMINI IMAGE GENERATION MCP SERVER

Exposes two tools over stdio:
1. generate_image: text-to-image with Nano Banana (flash) or Nano Banana Pro (pro)
2. edit_image: edit an existing image file with text instructions

Images are saved under outputDir (default ./generated-images) and returned inline.
"""

import asyncio
import json
import logging
import os
import sys

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool

from gemini_client import DEFAULT_BASE_URL, GeminiClient
from image_tools import (
    ASPECT_RATIOS,
    DEFAULT_ASPECT_RATIO,
    DEFAULT_IMAGE_SIZE,
    DEFAULT_MODEL,
    DEFAULT_OUTPUT_DIR,
    IMAGE_SIZES,
    MODELS,
    edit_image,
    generate_image,
    text_result,
)

logger = logging.getLogger(__name__)

# --- Configuration ---
CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "config.json")

DEFAULT_CONFIG = {
    "api_base_url": DEFAULT_BASE_URL,
    "request_timeout": None,
    "log_level": "INFO",
    "server_name": "image-generator-vibe-coding",
}


def load_config(path=None):
    """Load config.json (or $GEMINI_IMAGE_CONFIG) over the defaults; a missing file means defaults"""
    path = path or os.environ.get("GEMINI_IMAGE_CONFIG") or CONFIG_PATH
    cfg = dict(DEFAULT_CONFIG)
    if os.path.exists(path):
        with open(path, 'r') as f:
            cfg.update(json.load(f))
    return cfg


# --- Tool definitions ---
TOOLS = [
    Tool(
        name="generate_image",
        description="Generate an image from a text prompt using Google Gemini (Nano Banana / Nano Banana Pro)",
        inputSchema={
            "type": "object",
            "properties": {
                "prompt": {"type": "string", "description": "Text description of the image to generate"},
                "model": {"type": "string", "enum": list(MODELS), "default": DEFAULT_MODEL, "description": "Model to use: \"flash\" (fast, high-volume) or \"pro\" (high quality)"},
                "aspectRatio": {"type": "string", "enum": list(ASPECT_RATIOS), "default": DEFAULT_ASPECT_RATIO, "description": "Aspect ratio of the generated image"},
                "imageSize": {"type": "string", "enum": list(IMAGE_SIZES), "default": DEFAULT_IMAGE_SIZE, "description": "Resolution of the generated image"},
                "outputDir": {"type": "string", "default": DEFAULT_OUTPUT_DIR, "description": "Directory to save generated images"},
            },
            "required": ["prompt"],
        },
    ),
    Tool(
        name="edit_image",
        description="Edit an existing image with text instructions using Google Gemini",
        inputSchema={
            "type": "object",
            "properties": {
                "prompt": {"type": "string", "description": "Text instructions for how to edit the image"},
                "imagePath": {"type": "string", "description": "Path to the source image to edit"},
                "model": {"type": "string", "enum": list(MODELS), "default": DEFAULT_MODEL, "description": "Model to use: \"flash\" (fast) or \"pro\" (high quality)"},
                "aspectRatio": {"type": "string", "enum": list(ASPECT_RATIOS), "description": "Aspect ratio for the output image"},
                "outputDir": {"type": "string", "default": DEFAULT_OUTPUT_DIR, "description": "Directory to save edited images"},
            },
            "required": ["prompt", "imagePath"],
        },
    ),
]

HANDLERS = {
    "generate_image": generate_image,
    "edit_image": edit_image,
}


# --- MCP server ---
def create_server(client, cfg=None):
    cfg = cfg or DEFAULT_CONFIG
    server = Server(cfg["server_name"])

    @server.list_tools()
    async def list_tools():
        return TOOLS

    @server.call_tool()
    async def call_tool(name, arguments):
        handler = HANDLERS.get(name)
        if handler is None:
            return text_result(f"Unknown tool: {name}", is_error=True)
        logger.info("Calling %s", name)
        # Handlers block on HTTP and file I/O
        return await asyncio.to_thread(handler, client, arguments or {})

    return server


async def run_server(server):
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main():
    api_key = os.environ.get('GEMINI_API_KEY')
    if not api_key:
        sys.stderr.write(
            "Error: GEMINI_API_KEY environment variable is required.\n"
            "Get your key at https://aistudio.google.com/apikey\n"
        )
        sys.stderr.flush()
        sys.exit(1)

    try:
        cfg = load_config()
        logging.basicConfig(
            stream=sys.stderr,
            level=cfg["log_level"],
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        client = GeminiClient(api_key, base_url=cfg["api_base_url"], timeout=cfg["request_timeout"])
        server = create_server(client, cfg)
        logger.info("Image Generator MCP server running on stdio")
        asyncio.run(run_server(server))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception as e:
        sys.stderr.write(f"Fatal error: {e}\n")
        sys.stderr.flush()
        sys.exit(1)


if __name__ == "__main__":
    main()

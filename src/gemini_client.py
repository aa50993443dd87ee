"""
Gemini generateContent client.

Builds the REST payload for text-to-image and image edit requests and turns
the reply into an ordered list of TextPart / ImagePart values, so the tool
handlers never look at the raw JSON.
"""

import base64
import logging
import os
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MIME_TYPE = "image/png"

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ImagePart:
    data: str  # base64, as returned by the API
    mime_type: str = DEFAULT_MIME_TYPE


class GeminiAPIError(RuntimeError):
    """Non-200 reply from the Gemini API"""

    def __init__(self, status_code, message):
        self.status_code = status_code
        self.message = message
        super().__init__(f"API error: {status_code} - {message}")


# --- Request building ---
def get_mime_type(file_path):
    ext = os.path.splitext(file_path)[1].lower()
    return MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)


def build_generate_parts(prompt):
    return [{"text": prompt}]


def build_edit_parts(prompt, image_bytes, mime_type):
    """Source image first, then the edit instruction"""
    return [
        {
            "inlineData": {
                "mimeType": mime_type,
                "data": base64.b64encode(image_bytes).decode('utf-8'),
            }
        },
        {"text": prompt},
    ]


def build_payload(parts, aspect_ratio=None):
    generation_config = {"responseModalities": ["TEXT", "IMAGE"]}
    if aspect_ratio:
        generation_config["imageConfig"] = {"aspectRatio": aspect_ratio}
    return {
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": generation_config,
    }


# --- Response decoding ---
def parse_response_parts(data):
    """Return the first candidate's parts as TextPart / ImagePart, in order.

    Parts carrying neither text nor image data are dropped.
    """
    candidates = data.get("candidates") or []
    if not candidates:
        return []
    content = candidates[0].get("content") or {}

    parts = []
    for part in content.get("parts") or []:
        if part.get("text"):
            parts.append(TextPart(part["text"]))
        inline_data = part.get("inlineData")
        if inline_data and inline_data.get("data"):
            parts.append(ImagePart(inline_data["data"], inline_data.get("mimeType") or DEFAULT_MIME_TYPE))
    return parts


def _error_message(response):
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message") or response.text
    return response.text


class GeminiClient:
    """Thin wrapper around POST models/{model}:generateContent"""

    def __init__(self, api_key, base_url=DEFAULT_BASE_URL, timeout=None, session=None):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def generate_content(self, model_id, parts, aspect_ratio=None):
        url = f"{self.base_url}/models/{model_id}:generateContent"
        payload = build_payload(parts, aspect_ratio)
        headers = {
            'Content-Type': 'application/json',
            'x-goog-api-key': self.api_key,
        }

        logger.info("Requesting %s (aspect ratio: %s)", model_id, aspect_ratio or "model default")
        response = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
        if response.status_code != 200:
            raise GeminiAPIError(response.status_code, _error_message(response))

        parts = parse_response_parts(response.json())
        logger.info("Received %d part(s) from %s", len(parts), model_id)
        return parts

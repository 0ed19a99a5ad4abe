# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import base64
import logging
import time
from typing import List, Type, TypeVar

from google import genai
from google.genai import types

from models import api_config

logger = logging.getLogger(__name__)

API_KEY_LOGGING_MESSAGE = "Ran with user-specified API key"
QUERY_RESPONSE_MAX_OUTPUT_TOKENS = 4000

T = TypeVar("T")


class GeminiInvalidResponseException(Exception):
    pass


class GeminiMissingApiKeyException(Exception):
    pass


def _client(api_key: str | None) -> genai.Client:
    if not api_key:
        api_key = api_config.DEFAULT_API_KEY
    else:
        logger.info(API_KEY_LOGGING_MESSAGE)
    if not api_key:
        raise GeminiMissingApiKeyException("GEMINI_API_KEY is not configured.")
    return genai.Client(api_key=api_key)


def _truncate(prompt: str) -> str:
    return (prompt[:200] + "...") if len(prompt) > 200 else prompt


def call_predict(
    query: str,
    model=api_config.TEXT_MODEL,
    api_key: str | None = None,
    temperature: float = 0,
) -> str:
    client = _client(api_key)

    response = client.models.generate_content(
        model=model,
        contents=query,
        config=types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=QUERY_RESPONSE_MAX_OUTPUT_TOKENS,
        ),
    )
    if not response.text:
        raise GeminiInvalidResponseException()
    return response.text


def call_predict_with_image(
    prompt: str,
    image_bytes: bytes,
    mime_type: str = "image/png",
    model=api_config.TEXT_MODEL,
    api_key: str | None = None,
    temperature: float = 0,
) -> str:
    """Calls Gemini with a prompt and an image."""
    client = _client(api_key)

    logger.info(
        "Calling Gemini with image (%s, %d bytes), prompt: '%s'",
        mime_type,
        len(image_bytes),
        _truncate(prompt),
    )
    response = client.models.generate_content(
        model=model,
        contents=[
            prompt,
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
        ],
        config=types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=QUERY_RESPONSE_MAX_OUTPUT_TOKENS,
        ),
    )
    if not response.text:
        raise GeminiInvalidResponseException()
    return response.text


def call_predict_with_schema(
    query: str,
    response_schema: Type[T],
    model=api_config.TEXT_MODEL,
    api_key: str | None = None,
) -> T | List[T]:
    """Calls Gemini with a response schema for structured output."""
    client = _client(api_key)
    start_time = time.time()
    logger.info("Calling Gemini with schema, prompt: '%s'", _truncate(query))
    response = client.models.generate_content(
        model=model,
        contents=query,
        config={
            "response_mime_type": "application/json",
            "response_schema": response_schema,
            "temperature": 0,
        },
    )
    logger.info("Gemini with schema call took: %.2fs", time.time() - start_time)
    if not response.parsed:
        raise GeminiInvalidResponseException()
    return response.parsed


def generate_image(
    prompt: str,
    model=api_config.IMAGE_MODEL,
    api_key: str | None = None,
    aspect_ratio: str = "1:1",
) -> str:
    """
    Generates a single image with Imagen.

    Returns:
        str: The image as a `data:<mime>;base64,...` URI.
    """
    client = _client(api_key)
    start_time = time.time()
    logger.info("Calling Imagen, prompt: '%s'", _truncate(prompt))
    response = client.models.generate_images(
        model=model,
        prompt=prompt,
        config=types.GenerateImagesConfig(
            number_of_images=1, aspect_ratio=aspect_ratio
        ),
    )
    logger.info("Imagen call took: %.2fs", time.time() - start_time)

    if not response.generated_images:
        raise GeminiInvalidResponseException()
    image = response.generated_images[0].image
    if image is None or not image.image_bytes:
        raise GeminiInvalidResponseException()
    mime_type = image.mime_type or "image/png"
    encoded = base64.b64encode(image.image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"

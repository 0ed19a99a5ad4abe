"""
AI-assisted marketing copy and artwork.

The generative API is treated as unreliable: every helper returns an
`AiResult` and never raises, so a failing model call cannot break the admin
page that triggered it.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, TypeVar

from backend.dependencies import Services
from backend.errors import ValidationError
from models import gemini, prompts
from shared.api import (
    AiResult,
    BioSuggestion,
    HashtagSuggestion,
    LogoSuggestion,
    SocialPostSuggestion,
    UploadedFile,
)
from shared.constants import (
    BIO_TONES,
    HASHTAG_MEDIA_TYPES,
    SOCIAL_PLATFORMS,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

AI_UNAVAILABLE = (
    "La función de IA no está disponible en este momento. "
    "Por favor, inténtelo de nuevo más tarde."
)
CREATIVE_TEMPERATURE = 0.9


def _guarded(label: str, call: Callable[[], T]) -> AiResult[T]:
    try:
        return AiResult(success=True, data=call())
    except ValidationError as e:
        return AiResult(success=False, error=str(e))
    except Exception as e:
        logger.error("AI %s generation failed: %s", label, e)
        return AiResult(success=False, error=AI_UNAVAILABLE)


def _band_name(services: Services, band_name: Optional[str]) -> str:
    name = (band_name or services.settings.band_name or "").strip()
    if not name:
        raise ValidationError("El nombre de la banda es obligatorio.")
    return name


def _check_length(value: str, minimum: int, maximum: int, too_short: str, too_long: str) -> str:
    value = (value or "").strip()
    if len(value) < minimum:
        raise ValidationError(too_short)
    if len(value) > maximum:
        raise ValidationError(too_long)
    return value


def get_bio(
    services: Services,
    band_name: Optional[str],
    key_points: Sequence[str],
    tone: str,
) -> AiResult[BioSuggestion]:
    def generate() -> BioSuggestion:
        name = _band_name(services, band_name)
        points = [p.strip() for p in key_points or [] if p and p.strip()]
        if not points:
            raise ValidationError("Debes añadir al menos un punto clave.")
        if any(len(p) < 3 for p in points):
            raise ValidationError("El punto clave debe tener al menos 3 caracteres.")
        if tone not in BIO_TONES:
            raise ValidationError("Debes seleccionar un tono para la biografía.")
        text = gemini.call_predict(
            prompts.make_bio_prompt(name, points, tone),
            api_key=services.settings.gemini_api_key,
            temperature=CREATIVE_TEMPERATURE,
        )
        return BioSuggestion(biography=text.strip())

    return _guarded("bio", generate)


def get_logo_suggestion(services: Services, prompt: str) -> AiResult[LogoSuggestion]:
    def generate() -> LogoSuggestion:
        style = _check_length(
            prompt,
            10,
            200,
            "Describe con más detalle tu idea, al menos 10 caracteres.",
            "La descripción no puede exceder los 200 caracteres.",
        )
        image_data_uri = gemini.generate_image(
            prompts.make_logo_prompt(services.settings.band_name, style),
            api_key=services.settings.gemini_api_key,
            aspect_ratio="1:1",
        )
        return LogoSuggestion(image_data_uri=image_data_uri)

    return _guarded("logo", generate)


def get_social_post_suggestion(
    services: Services,
    topic: str,
    platform: str,
    flyer: Optional[UploadedFile] = None,
    band_name: Optional[str] = None,
) -> AiResult[SocialPostSuggestion]:
    """Writes a post for `platform`, reading event details off the flyer when given."""

    def generate() -> SocialPostSuggestion:
        name = _band_name(services, band_name)
        text_topic = _check_length(
            topic,
            10,
            500,
            "El tema debe tener al menos 10 caracteres.",
            "El tema no puede exceder los 500 caracteres.",
        )
        if platform not in SOCIAL_PLATFORMS:
            raise ValidationError("Debes seleccionar una plataforma.")
        has_flyer = flyer is not None and flyer.size > 0
        if has_flyer and not flyer.content_type.startswith("image/"):
            raise ValidationError("Only image files are allowed.")

        prompt = prompts.make_social_post_prompt(name, text_topic, platform, has_flyer)
        if has_flyer:
            text = gemini.call_predict_with_image(
                prompt,
                flyer.data,
                mime_type=flyer.content_type,
                api_key=services.settings.gemini_api_key,
                temperature=CREATIVE_TEMPERATURE,
            )
        else:
            text = gemini.call_predict(
                prompt,
                api_key=services.settings.gemini_api_key,
                temperature=CREATIVE_TEMPERATURE,
            )
        return SocialPostSuggestion(post_text=text.strip())

    return _guarded("social post", generate)


def _clean_hashtags(raw: Sequence[str]) -> List[str]:
    hashtags = []
    for tag in raw:
        tag = str(tag).strip().replace(" ", "")
        if not tag:
            continue
        if not tag.startswith("#"):
            tag = "#" + tag
        if tag not in hashtags:
            hashtags.append(tag)
    return hashtags


def get_hashtag_suggestions(
    services: Services,
    content_description: str,
    media_type: str,
    band_name: Optional[str] = None,
) -> AiResult[HashtagSuggestion]:
    def generate() -> HashtagSuggestion:
        name = _band_name(services, band_name)
        description = _check_length(
            content_description,
            10,
            500,
            "Por favor, proporciona una descripción más detallada.",
            "La descripción no puede exceder los 500 caracteres.",
        )
        if media_type not in HASHTAG_MEDIA_TYPES:
            raise ValidationError("Debes seleccionar un tipo de medio.")
        raw = gemini.call_predict_with_schema(
            prompts.make_hashtags_prompt(name, media_type, description),
            list[str],
            api_key=services.settings.gemini_api_key,
        )
        return HashtagSuggestion(hashtags=_clean_hashtags(raw))

    return _guarded("hashtag", generate)

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

from typing import List

BIO_PROMPT = """You are an expert music publicist and copywriter.

Your task is to write a compelling biography for the band "{band_name}".

The desired tone for the biography is: {tone}.

Use the following key points to craft the narrative. You can elaborate on them, connect them, and add creative flair, but the core information must be based on these points.

Key Points:
{key_points}

Please generate a biography that is engaging, professional, and ready for use in a press kit, website, or social media profile. Provide only the biography text."""

LOGO_PROMPT = (
    'Un logo profesional para una banda de rock llamada "{band_name}". '
    "El estilo del logo debe ser: {style}. El logo debe ser cuadrado, ideal "
    "para una foto de perfil en redes sociales."
)

SOCIAL_POST_PROMPT = """You are an expert social media manager for a rock band named "{band_name}".

Your task is to write an engaging social media post.

- Target Platform: {platform}
- Main Topic: {topic}
{flyer_instructions}
Your tone should be energetic and exciting. Adapt the post length and style for the specified platform. Include a call to action, like asking a question or encouraging shares.

Finally, add a list of 5-10 relevant hashtags to maximize reach.

Please generate the complete post text."""

FLYER_INSTRUCTIONS = (
    "- Key Information from Flyer: Analyze the provided image of the promotional "
    "flyer. Extract key details like date, time, venue, special guests, or special "
    "offers and incorporate them naturally into the post.\n"
)

HASHTAGS_PROMPT = """You are a social media expert for musical artists.

Given the following information about a band's content, suggest relevant hashtags to maximize its reach on social media. Consider trending topics, musical genres, and the band's name.

Band Name: {band_name}
Content Type: {media_type}
Content Description: {content_description}

Provide only the array of hashtags. Do not include any other text."""


def make_bio_prompt(band_name: str, key_points: List[str], tone: str) -> str:
    points = "\n".join(f"- {point}" for point in key_points)
    return BIO_PROMPT.format(band_name=band_name, tone=tone, key_points=points)


def make_logo_prompt(band_name: str, style: str) -> str:
    return LOGO_PROMPT.format(band_name=band_name, style=style)


def make_social_post_prompt(
    band_name: str, topic: str, platform: str, has_flyer: bool = False
) -> str:
    return SOCIAL_POST_PROMPT.format(
        band_name=band_name,
        platform=platform,
        topic=topic,
        flyer_instructions=FLYER_INSTRUCTIONS if has_flyer else "",
    )


def make_hashtags_prompt(
    band_name: str, media_type: str, content_description: str
) -> str:
    return HASHTAGS_PROMPT.format(
        band_name=band_name,
        media_type=media_type,
        content_description=content_description,
    )

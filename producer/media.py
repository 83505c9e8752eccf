"""
Audio and image generation operations.

- generate_audio: narration text -> raw PCM speech (base64)
- generate_voice_preview: short fixed sample for trying a voice
- generate_thumbnail_images: one concept -> up to 3 image variations

Thumbnail images fan out into 3 concurrent attempts. Each attempt goes
through the image route (rich model -> classic model on permission-denied)
and its own retries; a failed attempt becomes an absent result instead of
failing the batch.
"""
import asyncio
import io
import wave
from typing import List, Optional

import structlog

from studio.config import load_settings
from studio.errors import InvalidInputError
from studio.models import ThumbnailConcept, VoiceCustomization

from .gemini import GeminiClient, create_client, extract_inline_data
from .prompts import THUMBNAIL_IMAGE_PROMPT, VOICE_PREVIEW_TEXT
from .retry import retry_with_backoff
from .router import ModelRoute, thumbnail_image_route
from .schemas import GenerateAudioInput, GeneratedAudio, GenerateThumbnailImagesInput
from .utils import TTS_MAX_CHARS, clean_narration, preview

logger = structlog.get_logger()

THUMBNAIL_VARIATIONS = 3
DEFAULT_ASPECT_RATIO = "16:9"

TTS_SAMPLE_RATE = 24000
TTS_CHANNELS = 1
TTS_SAMPLE_WIDTH = 2


# =============================================================================
# AGENT 3: VOICE OVER
# =============================================================================

def style_directive(customization: Optional[VoiceCustomization]) -> str:
    """
    Natural-language speaking-style prefix for the TTS model.

    Knobs left at their neutral value (Neutral / Default / Normal) add
    nothing. Returns "" when no knob is set.
    """
    if customization is None:
        return ""

    styles = []
    if customization.accent and customization.accent != "Neutral":
        styles.append(f"{customization.accent} accent")
    if customization.age and customization.age != "Default":
        styles.append(f"{customization.age} voice")
    if customization.pacing and customization.pacing != "Normal":
        styles.append(f"speak {customization.pacing}")

    if not styles:
        return ""
    return f"(Speaking style: {', '.join(styles)}): "


def build_narration(text: str, customization: Optional[VoiceCustomization] = None) -> str:
    """Clean and truncate the narration first, then prepend the style directive."""
    return style_directive(customization) + clean_narration(text, TTS_MAX_CHARS)


async def generate_audio(
    ctx,
    params: GenerateAudioInput,
) -> GeneratedAudio:
    """
    Synthesize narration with a prebuilt voice.

    Markup characters are stripped and the text is cut to the TTS input
    limit before the speaking-style directive is prepended.
    """
    narration = build_narration(params.text, params.customization)
    if not narration.strip():
        raise InvalidInputError("No narration text to synthesize")

    settings = load_settings(ctx)
    client = create_client(ctx, settings)
    model = settings.model_tts

    ctx.report_input({
        "voice": params.voice,
        "customization": params.customization.model_dump() if params.customization else None,
        "text_len": len(params.text),
        "narration_preview": preview(narration),
        "model": model,
    })

    async def attempt() -> str:
        data = await client.generate_content(
            model,
            narration,
            response_modalities=["AUDIO"],
            voice_name=params.voice,
        )
        return extract_inline_data(data, model=model)

    audio_base64 = await retry_with_backoff(
        attempt,
        retries=settings.max_retries,
        delay=settings.retry_delay,
        operation="audio",
    )

    audio = GeneratedAudio(
        audio_base64=audio_base64,
        voice=params.voice,
        model=model,
        sample_rate=TTS_SAMPLE_RATE,
        channels=TTS_CHANNELS,
        sample_width=TTS_SAMPLE_WIDTH,
    )

    logger.info("audio_generated", voice=params.voice, payload_len=len(audio_base64))
    ctx.report_output({
        "voice": params.voice,
        "payload_len": len(audio_base64),
        "status": "success",
    })
    return audio


async def generate_voice_preview(
    ctx,
    voice: str,
    customization: Optional[VoiceCustomization] = None,
) -> GeneratedAudio:
    """Short sample so the user can hear a voice before committing."""
    return await generate_audio(
        ctx,
        GenerateAudioInput(text=VOICE_PREVIEW_TEXT, voice=voice, customization=customization),
    )


def pcm_to_wav(
    pcm: bytes,
    sample_rate: int = TTS_SAMPLE_RATE,
    channels: int = TTS_CHANNELS,
    sample_width: int = TTS_SAMPLE_WIDTH,
) -> bytes:
    """Wrap raw little-endian PCM in a RIFF/WAVE container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(sample_width)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm)
    return buffer.getvalue()


def audio_to_wav(audio: GeneratedAudio) -> bytes:
    return pcm_to_wav(
        audio.pcm_bytes,
        sample_rate=audio.sample_rate,
        channels=audio.channels,
        sample_width=audio.sample_width,
    )


# =============================================================================
# AGENT 7: THUMBNAIL IMAGES
# =============================================================================

def build_thumbnail_prompt(concept: ThumbnailConcept) -> str:
    return THUMBNAIL_IMAGE_PROMPT.format(
        visual_description=concept.visual_description,
        headline=concept.headline,
    )


async def _generate_variation(
    client: GeminiClient,
    route: ModelRoute,
    prompt: str,
    aspect_ratio: str,
    retries: int,
    delay: float,
    index: int,
) -> Optional[str]:
    """One fan-out attempt. Any failure becomes None."""

    async def rich_image(model: str) -> str:
        data = await client.generate_content(
            model,
            prompt,
            aspect_ratio=aspect_ratio,
        )
        return extract_inline_data(data, model=model)

    async def classic_image(model: str) -> str:
        images = await client.generate_images(
            model,
            prompt,
            number_of_images=1,
            aspect_ratio=aspect_ratio,
            output_mime_type="image/jpeg",
        )
        return images[0]

    try:
        return await route.run(
            rich_image,
            fallback=classic_image,
            retries=retries,
            delay=delay,
        )
    except Exception as e:
        logger.error(
            "thumbnail_variation_failed",
            variation=index + 1,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None


async def generate_thumbnail_images(
    ctx,
    params: GenerateThumbnailImagesInput,
) -> List[str]:
    """
    Render the selected thumbnail concept as up to 3 image variations.

    Returns the base64 payloads of the attempts that succeeded, in attempt
    order. An empty list means no image was produced; it is not an error.

    Raises:
        InvalidInputError: No concept was given.
        MissingConfigError: No API key; raised before any attempt starts.
    """
    concept = params.concept
    if concept is None:
        raise InvalidInputError("No thumbnail concept selected")

    settings = load_settings(ctx)
    client = create_client(ctx, settings)
    route = thumbnail_image_route(settings)
    prompt = build_thumbnail_prompt(concept)
    aspect_ratio = (
        params.aspect_ratio
        or ctx.get_config("thumbnail_aspect_ratio")
        or DEFAULT_ASPECT_RATIO
    )

    ctx.report_input({
        "headline": concept.headline,
        "visual_description": preview(concept.visual_description),
        "variations": THUMBNAIL_VARIATIONS,
        "aspect_ratio": aspect_ratio,
        "primary_model": route.primary,
        "fallback_model": route.fallback,
    })

    results = await asyncio.gather(*[
        _generate_variation(
            client,
            route,
            prompt,
            aspect_ratio,
            settings.max_retries,
            settings.retry_delay,
            index,
        )
        for index in range(THUMBNAIL_VARIATIONS)
    ])

    images = [image for image in results if image is not None]
    failed = len(results) - len(images)

    logger.info("thumbnail_images_generated", generated=len(images), failed=failed)
    ctx.report_output({
        "total_generated": len(images),
        "total_failed": failed,
        "status": "success" if images else "all_failed",
    })
    return images

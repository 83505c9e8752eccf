"""
Pydantic schemas for generation operation inputs and outputs.

Structured outputs reuse the domain models from studio.models so that an
operation's result can be passed straight back in as the "current" value
of its refinement path.
"""
import base64
from typing import List, Optional

from pydantic import BaseModel, Field, conlist, constr

from studio.models import (
    SeoMetadata,
    ThumbnailConcept,
    VideoIdea,
    VideoPlatform,
    VoiceCustomization,
)


# Structured list outputs: at least one non-empty entry
PromptList = conlist(constr(min_length=1), min_length=1)
Checklist = conlist(constr(min_length=1), min_length=1)
ConceptList = conlist(ThumbnailConcept, min_length=1)


# =============================================================================
# IDEA
# =============================================================================

class GenerateIdeaInput(BaseModel):
    """Input for generate_video_idea."""
    topic: str = Field(description="Free-text topic from the user")
    feedback: Optional[str] = Field(default=None, description="Refinement request")
    current_idea: Optional[VideoIdea] = Field(
        default=None,
        description="Previous result; required for the refinement path",
    )


# =============================================================================
# SCRIPT
# =============================================================================

class GenerateScriptInput(BaseModel):
    """Input for generate_script."""
    niche: str
    tone: str = "Engaging and Energetic"
    length: str = "8-10 minutes"
    idea: VideoIdea
    feedback: Optional[str] = None
    current_script: Optional[str] = None


# =============================================================================
# AUDIO
# =============================================================================

class GenerateAudioInput(BaseModel):
    """Input for generate_audio."""
    text: str
    voice: str = "Kore"
    customization: Optional[VoiceCustomization] = None


class GeneratedAudio(BaseModel):
    """Raw PCM speech: mono, 16-bit little-endian, 24 kHz."""
    audio_base64: str
    voice: str
    model: str
    sample_rate: int = 24000
    channels: int = 1
    sample_width: int = 2  # bytes per sample

    @property
    def pcm_bytes(self) -> bytes:
        return base64.b64decode(self.audio_base64)

    @property
    def duration_seconds(self) -> float:
        frame_size = self.channels * self.sample_width
        return len(self.pcm_bytes) / float(frame_size * self.sample_rate)


# =============================================================================
# VISUAL PROMPTS
# =============================================================================

class GeneratePromptsInput(BaseModel):
    """Input for generate_visual_prompts."""
    platform: VideoPlatform = VideoPlatform.VEO
    count: int = Field(default=5, ge=1, le=100)
    script: str
    feedback: Optional[str] = None
    current_prompts: List[str] = Field(default_factory=list)


# =============================================================================
# SEO
# =============================================================================

class GenerateSeoInput(BaseModel):
    """Input for generate_seo."""
    script: str
    prompts: List[str] = Field(default_factory=list, description="Prior visual prompts")
    feedback: Optional[str] = None
    current_seo: Optional[SeoMetadata] = None


# =============================================================================
# THUMBNAILS
# =============================================================================

class GenerateThumbnailConceptsInput(BaseModel):
    """Input for generate_thumbnail_concepts."""
    title: str
    script: str
    feedback: Optional[str] = None


class GenerateThumbnailImagesInput(BaseModel):
    """Input for generate_thumbnail_images."""
    concept: Optional[ThumbnailConcept] = None
    aspect_ratio: Optional[str] = Field(
        default=None,
        description="Overrides the thumbnail_aspect_ratio config value (default 16:9)",
    )


# =============================================================================
# SCHEDULE
# =============================================================================

class GenerateScheduleInput(BaseModel):
    """Input for generate_schedule."""
    title: str
    publish_date: str = Field(description="Target date, e.g. 2026-11-02")
    publish_time: str = Field(default="12:00", description="Target time, e.g. 18:30")
    feedback: Optional[str] = None
    current_schedule: List[str] = Field(default_factory=list)

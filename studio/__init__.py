"""
Shared models, configuration and errors for TubeFlow.
"""
from .config import StudioSettings, load_settings
from .context import RunContext
from .models import (
    WorkflowStage,
    WorkflowState,
    INITIAL_STATE,
    VideoPlatform,
    VideoIdea,
    SeoMetadata,
    ThumbnailConcept,
    VoiceCustomization,
)

__all__ = [
    "StudioSettings",
    "load_settings",
    "RunContext",
    "WorkflowStage",
    "WorkflowState",
    "INITIAL_STATE",
    "VideoPlatform",
    "VideoIdea",
    "SeoMetadata",
    "ThumbnailConcept",
    "VoiceCustomization",
]

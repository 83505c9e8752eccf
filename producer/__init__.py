"""
Generation operations and workflow controller for TubeFlow.

This package contains the Gemini client, the retry/routing layer, the
eight generation operations and the stage controller.
"""

from .llm import (
    generate_video_idea,
    generate_script,
    generate_visual_prompts,
    generate_seo,
    generate_thumbnail_concepts,
    generate_schedule,
)

from .media import (
    generate_audio,
    generate_voice_preview,
    generate_thumbnail_images,
    pcm_to_wav,
    audio_to_wav,
)

from .retry import (
    retry_with_backoff,
    is_retryable,
)

from .router import (
    ModelRoute,
    script_route,
    thumbnail_image_route,
)

from .workflow import (
    WorkflowController,
    build_asset_package,
    export_asset_package,
)

"""
Text generation operations for the TubeFlow workflow.

Each operation builds a prompt from typed inputs, sends it through the
retrier (and, for scripts, the model router) and returns a typed result:
- generate_video_idea: topic -> {title, concept}
- generate_script: idea + niche/tone/length -> long-form narration
- generate_visual_prompts: script -> list of image/video prompts
- generate_seo: script -> {title, description, tags}
- generate_thumbnail_concepts: title + script -> list of concepts
- generate_schedule: title + date/time -> launch checklist

Operations never swallow errors: exhausted retries surface to the caller.
"""
import json
from typing import Any, List, Type

import structlog
from pydantic import TypeAdapter, ValidationError

from studio.config import StudioSettings, load_settings
from studio.errors import InvalidInputError, MalformedResponseError
from studio.models import SeoMetadata, ThumbnailConcept, VideoIdea

from .gemini import GeminiClient, create_client, extract_text
from .prompts import (
    IDEA_SYSTEM, IDEA_PROMPT, IDEA_REFINE_PROMPT,
    SCRIPT_SYSTEM, SCRIPT_HEADER, SCRIPT_PROMPT, SCRIPT_REFINE_PROMPT,
    VISUAL_PROMPTS_SYSTEM, VISUAL_PROMPTS_PROMPT, VISUAL_PROMPTS_REFINE_PROMPT,
    SEO_SYSTEM, SEO_PROMPT, SEO_REFINE_PROMPT,
    THUMBNAIL_CONCEPTS_SYSTEM, THUMBNAIL_CONCEPTS_PROMPT,
    SCHEDULE_SYSTEM, SCHEDULE_PROMPT, SCHEDULE_REFINE_PROMPT,
)
from .retry import retry_with_backoff
from .router import script_route
from .schemas import (
    Checklist,
    ConceptList,
    PromptList,
    GenerateIdeaInput,
    GenerateScriptInput,
    GeneratePromptsInput,
    GenerateSeoInput,
    GenerateThumbnailConceptsInput,
    GenerateScheduleInput,
)
from .utils import (
    PROMPT_WRITER_CONTEXT_CHARS,
    SCRIPT_REFINE_CONTEXT_CHARS,
    SEO_CONTEXT_CHARS,
    THUMBNAIL_CONTEXT_CHARS,
    preview,
    resolve_script_length,
    truncate_context,
)

logger = structlog.get_logger()

# How many prior visual prompts the SEO agent sees
SEO_PROMPT_SAMPLE = 5


# =============================================================================
# STRUCTURED OUTPUT CALLS
# =============================================================================

def _parse_structured(text: str, adapter: TypeAdapter, model: str) -> Any:
    """Validate backend JSON against the expected shape."""
    try:
        return adapter.validate_json(text)
    except ValidationError as e:
        logger.error(
            "structured_output_invalid",
            model=model,
            error=str(e)[:500],
            response_preview=preview(text, 300),
        )
        raise MalformedResponseError(
            f"Response did not match expected schema: {e.error_count()} error(s)",
            model=model,
        ) from e


async def _call_structured(
    client: GeminiClient,
    settings: StudioSettings,
    prompt: str,
    system_instruction: str,
    response_type: Type,
    operation: str,
) -> Any:
    """One retried structured-output call against the fast model."""
    adapter = TypeAdapter(response_type)
    schema = adapter.json_schema()
    model = settings.model_fast

    async def attempt():
        data = await client.generate_content(
            model,
            prompt,
            system_instruction=system_instruction,
            response_schema=schema,
        )
        return _parse_structured(extract_text(data, model=model), adapter, model)

    return await retry_with_backoff(
        attempt,
        retries=settings.max_retries,
        delay=settings.retry_delay,
        operation=operation,
    )


# =============================================================================
# AGENT 1: IDEA
# =============================================================================

async def generate_video_idea(
    ctx,
    params: GenerateIdeaInput,
) -> VideoIdea:
    """
    Generate (or refine) a video title and concept for a topic.

    The refinement path is taken only when both feedback and the previous
    idea are given; otherwise a fresh idea is generated.
    """
    settings = load_settings(ctx)
    client = create_client(ctx, settings)
    refining = bool(params.feedback and params.current_idea)

    ctx.report_input({
        "topic": params.topic,
        "feedback": params.feedback,
        "refining": refining,
        "model": settings.model_fast,
    })

    if refining:
        prompt = IDEA_REFINE_PROMPT.format(
            topic=params.topic,
            title=params.current_idea.title,
            concept=params.current_idea.concept,
            feedback=params.feedback,
        )
    else:
        prompt = IDEA_PROMPT.format(topic=params.topic)

    idea = await _call_structured(
        client, settings, prompt, IDEA_SYSTEM, VideoIdea, operation="idea",
    )

    logger.info("idea_generated", title=idea.title[:80], refined=refining)
    ctx.report_output({
        "title": idea.title,
        "concept": idea.concept,
        "status": "success",
    })
    return idea


# =============================================================================
# AGENT 2: SCRIPT
# =============================================================================

def build_script_prompt(params: GenerateScriptInput) -> str:
    """Assemble the script request; exposed for inspection in tests."""
    target = resolve_script_length(params.length)

    prompt = SCRIPT_HEADER.format(
        title=params.idea.title,
        concept=params.idea.concept,
        length=params.length,
        min_words=target.min_words,
        niche=params.niche,
        tone=params.tone,
    )

    if params.feedback and params.current_script:
        prompt += SCRIPT_REFINE_PROMPT.format(
            current_script=truncate_context(params.current_script, SCRIPT_REFINE_CONTEXT_CHARS),
            feedback=params.feedback,
        )
    else:
        prompt += SCRIPT_PROMPT.format(
            length=params.length,
            min_words=target.min_words,
            section_count=target.section_count,
        )
    return prompt


async def generate_script(
    ctx,
    params: GenerateScriptInput,
) -> str:
    """
    Write (or rewrite) the long-form narration script.

    Routed: the complex model is tried first with its own retry budget; if
    it fails for any reason the same request is re-issued on the fast model.
    """
    settings = load_settings(ctx)
    client = create_client(ctx, settings)
    route = script_route(settings)
    prompt = build_script_prompt(params)
    system_instruction = SCRIPT_SYSTEM.format(tone=params.tone)

    ctx.report_input({
        "title": params.idea.title,
        "niche": params.niche,
        "tone": params.tone,
        "length": params.length,
        "refining": bool(params.feedback and params.current_script),
        "primary_model": route.primary,
        "fallback_model": route.fallback,
    })

    async def write(model: str) -> str:
        data = await client.generate_content(
            model,
            prompt,
            system_instruction=system_instruction,
        )
        return extract_text(data, model=model)

    script = await route.run(
        write,
        retries=settings.max_retries,
        delay=settings.retry_delay,
    )

    word_count = len(script.split())
    logger.info("script_written", words=word_count, title=params.idea.title[:80])
    ctx.report_output({
        "word_count": word_count,
        "script_preview": preview(script),
        "status": "success",
    })
    return script


# =============================================================================
# AGENT 4: VISUAL PROMPTS
# =============================================================================

async def generate_visual_prompts(
    ctx,
    params: GeneratePromptsInput,
) -> List[str]:
    """Generate image/video generation prompts for the key scenes of the script."""
    settings = load_settings(ctx)
    client = create_client(ctx, settings)
    platform = params.platform.value

    ctx.report_input({
        "platform": platform,
        "count": params.count,
        "script_len": len(params.script),
        "feedback": params.feedback,
    })

    prompt = VISUAL_PROMPTS_PROMPT.format(
        platform=platform,
        count=params.count,
        script=truncate_context(params.script, PROMPT_WRITER_CONTEXT_CHARS),
    )
    if params.feedback and params.current_prompts:
        prompt += VISUAL_PROMPTS_REFINE_PROMPT.format(
            current_prompts=json.dumps(params.current_prompts),
            feedback=params.feedback,
        )

    prompts = await _call_structured(
        client,
        settings,
        prompt,
        VISUAL_PROMPTS_SYSTEM.format(platform=platform),
        PromptList,
        operation="visual_prompts",
    )

    logger.info("visual_prompts_generated", count=len(prompts), platform=platform)
    ctx.report_output({
        "prompt_count": len(prompts),
        "status": "success",
    })
    return prompts


# =============================================================================
# AGENT 5: SEO
# =============================================================================

async def generate_seo(
    ctx,
    params: GenerateSeoInput,
) -> SeoMetadata:
    """Generate (or refine) title, description and tags for upload."""
    settings = load_settings(ctx)
    client = create_client(ctx, settings)
    refining = bool(params.feedback and params.current_seo)

    ctx.report_input({
        "script_len": len(params.script),
        "prompt_count": len(params.prompts),
        "feedback": params.feedback,
        "refining": refining,
    })

    prompt = f"Script Context: {truncate_context(params.script, SEO_CONTEXT_CHARS)}\n\n"
    if params.prompts:
        visuals = "\n".join(f"- {p}" for p in params.prompts[:SEO_PROMPT_SAMPLE])
        prompt += f"Visual Direction:\n{visuals}\n\n"

    if refining:
        prompt += SEO_REFINE_PROMPT.format(
            title=params.current_seo.title,
            description=params.current_seo.description,
            tags=", ".join(params.current_seo.tags),
            feedback=params.feedback,
        )
    else:
        prompt += SEO_PROMPT

    seo = await _call_structured(
        client, settings, prompt, SEO_SYSTEM, SeoMetadata, operation="seo",
    )

    logger.info("seo_generated", title=seo.title[:80], tags=len(seo.tags))
    ctx.report_output({
        "title": seo.title,
        "tag_count": len(seo.tags),
        "status": "success",
    })
    return seo


# =============================================================================
# AGENT 6: THUMBNAIL CONCEPTS
# =============================================================================

async def generate_thumbnail_concepts(
    ctx,
    params: GenerateThumbnailConceptsInput,
) -> List[ThumbnailConcept]:
    """Generate 3-5 thumbnail concepts (headline, visual, reasoning)."""
    settings = load_settings(ctx)
    client = create_client(ctx, settings)

    ctx.report_input({
        "title": params.title,
        "script_len": len(params.script),
        "feedback": params.feedback,
    })

    prompt = (
        f"Video Title: {params.title}\n"
        f"Script Summary: {truncate_context(params.script, THUMBNAIL_CONTEXT_CHARS)}\n\n"
    )
    if params.feedback:
        prompt += f"User Feedback for revision: {params.feedback}\n\n"
    prompt += THUMBNAIL_CONCEPTS_PROMPT

    concepts = await _call_structured(
        client,
        settings,
        prompt,
        THUMBNAIL_CONCEPTS_SYSTEM,
        ConceptList,
        operation="thumbnail_concepts",
    )

    logger.info("thumbnail_concepts_generated", count=len(concepts))
    ctx.report_output({
        "headlines": [c.headline for c in concepts],
        "status": "success",
    })
    return concepts


# =============================================================================
# AGENT 8: SCHEDULE
# =============================================================================

async def generate_schedule(
    ctx,
    params: GenerateScheduleInput,
) -> List[str]:
    """Generate a reverse-chronological production and promotion checklist."""
    if not params.publish_date:
        raise InvalidInputError("A publish date is required to build a schedule")

    settings = load_settings(ctx)
    client = create_client(ctx, settings)

    ctx.report_input({
        "title": params.title,
        "publish_date": params.publish_date,
        "publish_time": params.publish_time,
        "feedback": params.feedback,
    })

    prompt = SCHEDULE_PROMPT.format(
        title=params.title,
        publish_date=params.publish_date,
        publish_time=params.publish_time,
    )
    if params.feedback and params.current_schedule:
        prompt += SCHEDULE_REFINE_PROMPT.format(
            current_schedule=json.dumps(params.current_schedule),
            feedback=params.feedback,
        )

    schedule = await _call_structured(
        client, settings, prompt, SCHEDULE_SYSTEM, Checklist, operation="schedule",
    )

    logger.info("schedule_generated", items=len(schedule))
    ctx.report_output({
        "item_count": len(schedule),
        "status": "success",
    })
    return schedule

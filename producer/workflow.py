"""
Workflow controller for the nine-stage TubeFlow session.

The controller owns one immutable WorkflowState and is the only thing that
replaces it. Generation operations are pure; the controller builds their
inputs from the current state, awaits them, and applies the result only
once the call has completed. A failed call leaves the state untouched, and
a result that arrives after the user moved to another stage is dropped.

Transition rules:
- approve(): current stage -> current + 1, only if the stage has output
- go_to(): any stage at or before the current one
- generation runs only for stages at or before the current one, and only
  when every earlier stage has output
"""
import base64
from pathlib import Path
from typing import List, Optional, Union

import structlog

from studio.errors import (
    InvalidInputError,
    MissingPrerequisiteError,
    StageNavigationError,
    StageNotApprovableError,
)
from studio.models import (
    INITIAL_STATE,
    VideoPlatform,
    VoiceCustomization,
    WorkflowStage,
    WorkflowState,
)

from .llm import (
    generate_schedule,
    generate_script,
    generate_seo,
    generate_thumbnail_concepts,
    generate_video_idea,
    generate_visual_prompts,
)
from .media import (
    audio_to_wav,
    generate_audio,
    generate_thumbnail_images,
    generate_voice_preview,
)
from .schemas import (
    GenerateAudioInput,
    GenerateIdeaInput,
    GeneratePromptsInput,
    GenerateScheduleInput,
    GenerateScriptInput,
    GenerateSeoInput,
    GenerateThumbnailConceptsInput,
    GenerateThumbnailImagesInput,
    GeneratedAudio,
)

logger = structlog.get_logger()

PACKAGE_FILENAME = "tubeflow-assets.txt"


# =============================================================================
# PACKAGE ASSEMBLY
# =============================================================================

def build_asset_package(state: WorkflowState) -> str:
    """Plain-text package of the final assets. Pure; does not touch state."""
    seo = state.seo
    plan = state.plan
    schedule = "\n".join(f"- {item}" for item in plan.generated_schedule)

    return (
        f"TITLE: {seo.optimized_title}\n\n"
        f"DESCRIPTION:\n{seo.optimized_description}\n\n"
        f"TAGS:\n{', '.join(seo.optimized_tags)}\n\n"
        f"---\n"
        f"PUBLISH: {plan.publish_date} @ {plan.publish_time}\n\n"
        f"SCHEDULE:\n{schedule}\n\n"
        f"SCRIPT:\n{state.script.generated_script}"
    )


def export_asset_package(state: WorkflowState, directory: Union[str, Path]) -> List[Path]:
    """
    Write the package text, the voiceover WAV and the thumbnails to disk.

    Returns the written paths.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    written = []

    package_path = directory / PACKAGE_FILENAME
    package_path.write_text(build_asset_package(state), encoding="utf-8")
    written.append(package_path)

    voice = state.voice
    if voice.generated_audio_base64:
        audio = GeneratedAudio(
            audio_base64=voice.generated_audio_base64,
            voice=voice.selected_voice,
            model="",
        )
        wav_path = directory / f"voiceover-{voice.selected_voice}.wav"
        wav_path.write_bytes(audio_to_wav(audio))
        written.append(wav_path)

    for index, image in enumerate(state.thumbnail_images.generated_images):
        image_path = directory / f"thumbnail-variant-{index + 1}.png"
        image_path.write_bytes(base64.b64decode(image))
        written.append(image_path)

    logger.info("asset_package_exported", directory=str(directory), files=len(written))
    return written


# =============================================================================
# CONTROLLER
# =============================================================================

class WorkflowController:
    """Drives one session through the nine stages."""

    def __init__(self, ctx, state: Optional[WorkflowState] = None):
        self.ctx = ctx
        self._state = state or INITIAL_STATE

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def current_stage(self) -> WorkflowStage:
        return self._state.current_stage

    @property
    def is_complete(self) -> bool:
        return self._state.current_stage == WorkflowStage.FINAL_REVIEW

    # --- Navigation ---

    def can_approve(self) -> bool:
        data = self._state.stage_data(self.current_stage)
        return data is not None and data.has_output

    def approve(self) -> WorkflowState:
        """Mark the current stage approved and advance to the next one."""
        stage = self.current_stage
        data = self._state.stage_data(stage)

        if data is None:
            raise StageNotApprovableError(stage.name, "final stage is terminal")
        if not data.has_output:
            raise StageNotApprovableError(stage.name, "no generated output yet")

        next_stage = WorkflowStage(stage + 1)
        state = self._state.with_stage_data(stage, approved=True)
        self._state = state.model_copy(update={"current_stage": next_stage})

        logger.info("stage_approved", stage=stage.name, next_stage=next_stage.name)
        return self._state

    def go_to(self, stage: WorkflowStage) -> WorkflowState:
        """Revisit an already reached stage. Data and approvals are kept."""
        stage = WorkflowStage(stage)
        if stage > self.current_stage:
            raise StageNavigationError(
                f"Cannot jump ahead to {stage.name}; approve {self.current_stage.name} first",
                {"current": self.current_stage.name, "requested": stage.name},
            )
        self._state = self._state.model_copy(update={"current_stage": stage})
        return self._state

    def update_inputs(self, stage: WorkflowStage, **changes) -> WorkflowState:
        """Apply user edits to a stage's input fields."""
        stage = WorkflowStage(stage)
        data = self._state.stage_data(stage)
        if data is None:
            raise InvalidInputError(f"{stage.name} has no editable inputs")

        # Approval only changes through approve()
        unknown = [
            name for name in changes
            if name not in type(data).model_fields or name == "approved"
        ]
        if unknown:
            raise InvalidInputError(
                f"Unknown fields for {stage.name}: {', '.join(unknown)}",
                {"stage": stage.name, "fields": unknown},
            )

        self._state = self._state.with_stage_data(stage, **changes)
        return self._state

    def _check_can_generate(self, stage: WorkflowStage) -> WorkflowStage:
        """Validate a generation request; returns the stage the user is on."""
        if stage > self.current_stage:
            raise StageNavigationError(
                f"{stage.name} has not been reached yet",
                {"current": self.current_stage.name, "requested": stage.name},
            )
        missing = self._state.missing_prerequisites(stage)
        if missing:
            raise MissingPrerequisiteError(stage.name, [m.name for m in missing])
        return self.current_stage

    def _apply(self, started_at: WorkflowStage, stage: WorkflowStage, **changes) -> None:
        """
        Store a completed result, unless the user navigated away while the
        call was in flight. Abandoned results are dropped.
        """
        if self.current_stage != started_at:
            logger.info(
                "stale_result_discarded",
                stage=stage.name,
                started_at=started_at.name,
                current=self.current_stage.name,
            )
            return
        self._state = self._state.with_stage_data(stage, **changes)

    # --- Stage operations ---

    async def run_idea(self, topic: Optional[str] = None, feedback: Optional[str] = None) -> WorkflowState:
        stage = WorkflowStage.IDEA_GENERATION
        started_at = self._check_can_generate(stage)

        idea_data = self._state.idea
        topic = topic if topic is not None else idea_data.user_input
        if not topic.strip():
            raise InvalidInputError("A topic is required to generate an idea")

        result = await generate_video_idea(self.ctx, GenerateIdeaInput(
            topic=topic,
            feedback=feedback,
            current_idea=idea_data.idea if feedback else None,
        ))

        self._apply(
            started_at,
            stage,
            user_input=topic,
            generated_title=result.title,
            generated_concept=result.concept,
        )
        return self._state

    async def run_script(self, feedback: Optional[str] = None) -> WorkflowState:
        stage = WorkflowStage.SCRIPT_WRITING
        started_at = self._check_can_generate(stage)

        script_data = self._state.script
        if not script_data.niche.strip():
            raise InvalidInputError("A niche is required to write a script")
        idea = self._state.idea.idea
        if idea is None:
            raise InvalidInputError("The idea needs both a title and a concept")

        result = await generate_script(self.ctx, GenerateScriptInput(
            niche=script_data.niche,
            tone=script_data.tone,
            length=script_data.length,
            idea=idea,
            feedback=feedback,
            current_script=script_data.generated_script or None,
        ))

        self._apply(started_at, stage, generated_script=result)
        return self._state

    async def run_voiceover(
        self,
        voice: Optional[str] = None,
        customization: Optional[VoiceCustomization] = None,
        text: Optional[str] = None,
    ) -> WorkflowState:
        """Synthesize the voiceover; text defaults to the edited narration or the script."""
        stage = WorkflowStage.VOICE_OVER_GENERATION
        started_at = self._check_can_generate(stage)

        voice_data = self._state.voice
        voice = voice or voice_data.selected_voice
        customization = customization or voice_data.customization
        narration = text or voice_data.narration_text or self._state.script.generated_script

        result = await generate_audio(self.ctx, GenerateAudioInput(
            text=narration,
            voice=voice,
            customization=customization,
        ))

        self._apply(
            started_at,
            stage,
            selected_voice=voice,
            customization=customization,
            narration_text=text or voice_data.narration_text,
            generated_audio_base64=result.audio_base64,
        )
        return self._state

    async def run_voice_preview(
        self,
        voice: Optional[str] = None,
        customization: Optional[VoiceCustomization] = None,
    ) -> GeneratedAudio:
        """Sample a voice. Does not change the session state."""
        self._check_can_generate(WorkflowStage.VOICE_OVER_GENERATION)
        voice_data = self._state.voice
        return await generate_voice_preview(
            self.ctx,
            voice or voice_data.selected_voice,
            customization or voice_data.customization,
        )

    async def run_prompts(
        self,
        feedback: Optional[str] = None,
        platform: Optional[VideoPlatform] = None,
        count: Optional[int] = None,
    ) -> WorkflowState:
        stage = WorkflowStage.PROMPT_WRITING
        started_at = self._check_can_generate(stage)

        prompt_data = self._state.prompts
        platform = platform or prompt_data.platform
        count = count or prompt_data.count

        result = await generate_visual_prompts(self.ctx, GeneratePromptsInput(
            platform=platform,
            count=count,
            script=self._state.script.generated_script,
            feedback=feedback,
            current_prompts=list(prompt_data.generated_prompts),
        ))

        self._apply(
            started_at,
            stage,
            platform=platform,
            count=count,
            generated_prompts=result,
        )
        return self._state

    async def run_seo(self, feedback: Optional[str] = None) -> WorkflowState:
        stage = WorkflowStage.SEO_OPTIMIZATION
        started_at = self._check_can_generate(stage)

        result = await generate_seo(self.ctx, GenerateSeoInput(
            script=self._state.script.generated_script,
            prompts=list(self._state.prompts.generated_prompts),
            feedback=feedback,
            current_seo=self._state.seo.metadata,
        ))

        self._apply(
            started_at,
            stage,
            optimized_title=result.title,
            optimized_description=result.description,
            optimized_tags=list(result.tags),
        )
        return self._state

    async def run_thumbnail_concepts(self, feedback: Optional[str] = None) -> WorkflowState:
        stage = WorkflowStage.THUMBNAIL_DESIGN
        started_at = self._check_can_generate(stage)

        result = await generate_thumbnail_concepts(self.ctx, GenerateThumbnailConceptsInput(
            title=self._state.seo.optimized_title,
            script=self._state.script.generated_script,
            feedback=feedback,
        ))

        # New concepts invalidate the previous selection
        self._apply(
            started_at,
            stage,
            generated_concepts=list(result),
            selected_concept_index=None,
        )
        return self._state

    def select_concept(self, index: int) -> WorkflowState:
        concepts = self._state.thumbnails.generated_concepts
        if not 0 <= index < len(concepts):
            raise InvalidInputError(
                f"Concept index {index} out of range",
                {"index": index, "available": len(concepts)},
            )
        self._state = self._state.with_stage_data(
            WorkflowStage.THUMBNAIL_DESIGN,
            selected_concept_index=index,
        )
        return self._state

    async def run_thumbnail_images(self) -> WorkflowState:
        stage = WorkflowStage.THUMBNAIL_GENERATION
        started_at = self._check_can_generate(stage)

        images = await generate_thumbnail_images(self.ctx, GenerateThumbnailImagesInput(
            concept=self._state.thumbnails.selected_concept,
        ))

        self._apply(started_at, stage, generated_images=images)
        return self._state

    async def run_schedule(
        self,
        publish_date: Optional[str] = None,
        publish_time: Optional[str] = None,
        feedback: Optional[str] = None,
    ) -> WorkflowState:
        stage = WorkflowStage.CONTENT_PLANNING
        started_at = self._check_can_generate(stage)

        plan = self._state.plan
        publish_date = publish_date or plan.publish_date
        publish_time = publish_time or plan.publish_time or "12:00"

        result = await generate_schedule(self.ctx, GenerateScheduleInput(
            title=self._state.seo.optimized_title,
            publish_date=publish_date,
            publish_time=publish_time,
            feedback=feedback,
            current_schedule=list(plan.generated_schedule),
        ))

        self._apply(
            started_at,
            stage,
            publish_date=publish_date,
            publish_time=publish_time,
            generated_schedule=result,
        )
        return self._state

    # --- Final review ---

    def build_package(self) -> str:
        return build_asset_package(self._state)

    def export_package(self, directory: Union[str, Path]) -> List[Path]:
        if not self.is_complete:
            raise StageNavigationError(
                "Package export is only available at the final review stage",
                {"current": self.current_stage.name},
            )
        return export_asset_package(self._state, directory)

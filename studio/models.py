"""
Domain models for the TubeFlow content workflow.

These models define the in-memory session state for one video:
- WorkflowStage: the nine ordered stages
- One data record per stage (user inputs, last generated output, approval)
- WorkflowState: current stage plus all stage records

All models are frozen; state changes go through model_copy(update=...).
Nothing here is persisted.
"""
import enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WorkflowStage(enum.IntEnum):
    """Ordered workflow stages. Transitions only ever go to value + 1."""
    IDEA_GENERATION = 0
    SCRIPT_WRITING = 1
    VOICE_OVER_GENERATION = 2
    PROMPT_WRITING = 3
    SEO_OPTIMIZATION = 4
    THUMBNAIL_DESIGN = 5
    THUMBNAIL_GENERATION = 6
    CONTENT_PLANNING = 7
    FINAL_REVIEW = 8

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


class VideoPlatform(str, enum.Enum):
    """Target generator for the visual prompts."""
    VEO = "Veo 3.1"
    SORA = "Sora 2.0"
    WAN = "Wan 2.2"
    GROK = "Grok AI"
    MIDJOURNEY = "Midjourney (Video)"
    RUNWAY = "Runway Gen-3"


# =============================================================================
# CATALOGS
# =============================================================================

SCRIPT_TONES = [
    "Energetic & Fast-Paced",
    "Professional & Educational",
    "Relaxed & Conversational",
    "Dramatic & Storytelling",
    "Humorous & Witty",
]

SCRIPT_LENGTHS = [
    "Short (Under 5 min)",
    "Medium (8-10 min)",
    "Long (15+ min)",
]

# name -> (gender, style)
VOICES = {
    "Puck": ("Male", "Deep, Storytelling"),
    "Charon": ("Male", "Authoritative, News"),
    "Kore": ("Female", "Calm, Soothing"),
    "Fenrir": ("Male", "Energetic, Intense"),
    "Zephyr": ("Female", "Friendly, Conversational"),
}

ACCENTS = ["Neutral", "American", "British", "Australian", "Indian", "Transatlantic"]
AGES = ["Default", "Youthful", "Mid-Life", "Elderly", "Gravelly"]
PACING = ["Normal", "Fast", "Slow", "Dramatic Pause"]


# =============================================================================
# GENERATED CONTENT (structured outputs)
# =============================================================================

class VideoIdea(BaseModel):
    """Title + short concept for a video."""
    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    concept: str = Field(min_length=1)


class SeoMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    tags: List[str]


class ThumbnailConcept(BaseModel):
    """One thumbnail idea: overlay text, what to show, and why it works."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    headline: str = Field(min_length=1)
    visual_description: str = Field(alias="visualDescription", min_length=1)
    reasoning: str = Field(min_length=1)


class VoiceCustomization(BaseModel):
    """
    Free-form style knobs for the narrator.

    Values are not enforced against the catalogs; they are turned into a
    natural-language directive in front of the narration text.
    """
    model_config = ConfigDict(frozen=True)

    accent: str = "Neutral"
    age: str = "Default"
    pacing: str = "Normal"


# =============================================================================
# STAGE DATA
# =============================================================================

class StageData(BaseModel):
    """Common base: every stage carries an approval flag."""
    model_config = ConfigDict(frozen=True)

    approved: bool = False

    @property
    def has_output(self) -> bool:
        """Whether the stage produced something approvable. Overridden per stage."""
        return False


class IdeaData(StageData):
    user_input: str = ""
    generated_title: str = ""
    generated_concept: str = ""

    @property
    def has_output(self) -> bool:
        return bool(self.generated_title)

    @property
    def idea(self) -> Optional[VideoIdea]:
        if not (self.generated_title and self.generated_concept):
            return None
        return VideoIdea(title=self.generated_title, concept=self.generated_concept)


class ScriptData(StageData):
    niche: str = ""
    tone: str = "Engaging and Energetic"
    length: str = "8-10 minutes"
    generated_script: str = ""

    @property
    def has_output(self) -> bool:
        return bool(self.generated_script)


class VoiceData(StageData):
    selected_voice: str = "Kore"
    customization: VoiceCustomization = Field(default_factory=VoiceCustomization)
    narration_text: Optional[str] = None  # None means "use the script"
    generated_audio_base64: Optional[str] = None

    @property
    def has_output(self) -> bool:
        return bool(self.generated_audio_base64)


class PromptData(StageData):
    count: int = Field(default=5, ge=1, le=100)
    platform: VideoPlatform = VideoPlatform.VEO
    generated_prompts: List[str] = Field(default_factory=list)

    @property
    def has_output(self) -> bool:
        return len(self.generated_prompts) > 0


class SeoData(StageData):
    optimized_title: str = ""
    optimized_description: str = ""
    optimized_tags: List[str] = Field(default_factory=list)

    @property
    def has_output(self) -> bool:
        return bool(self.optimized_title)

    @property
    def metadata(self) -> Optional[SeoMetadata]:
        if not (self.optimized_title and self.optimized_description):
            return None
        return SeoMetadata(
            title=self.optimized_title,
            description=self.optimized_description,
            tags=list(self.optimized_tags),
        )


class ThumbnailData(StageData):
    generated_concepts: List[ThumbnailConcept] = Field(default_factory=list)
    selected_concept_index: Optional[int] = None

    @property
    def has_output(self) -> bool:
        return self.selected_concept is not None

    @property
    def selected_concept(self) -> Optional[ThumbnailConcept]:
        index = self.selected_concept_index
        if index is None or not 0 <= index < len(self.generated_concepts):
            return None
        return self.generated_concepts[index]


class ThumbnailGenerationData(StageData):
    generated_images: List[str] = Field(default_factory=list)  # base64

    @property
    def has_output(self) -> bool:
        return len(self.generated_images) > 0


class PlannerData(StageData):
    publish_date: str = ""
    publish_time: str = ""
    generated_schedule: List[str] = Field(default_factory=list)

    @property
    def has_output(self) -> bool:
        return len(self.generated_schedule) > 0


# =============================================================================
# WORKFLOW STATE
# =============================================================================

# Stage -> attribute name on WorkflowState
STAGE_FIELDS = {
    WorkflowStage.IDEA_GENERATION: "idea",
    WorkflowStage.SCRIPT_WRITING: "script",
    WorkflowStage.VOICE_OVER_GENERATION: "voice",
    WorkflowStage.PROMPT_WRITING: "prompts",
    WorkflowStage.SEO_OPTIMIZATION: "seo",
    WorkflowStage.THUMBNAIL_DESIGN: "thumbnails",
    WorkflowStage.THUMBNAIL_GENERATION: "thumbnail_images",
    WorkflowStage.CONTENT_PLANNING: "plan",
}


class WorkflowState(BaseModel):
    """Whole session: where we are plus every stage's data."""
    model_config = ConfigDict(frozen=True)

    current_stage: WorkflowStage = WorkflowStage.IDEA_GENERATION
    idea: IdeaData = Field(default_factory=IdeaData)
    script: ScriptData = Field(default_factory=ScriptData)
    voice: VoiceData = Field(default_factory=VoiceData)
    prompts: PromptData = Field(default_factory=PromptData)
    seo: SeoData = Field(default_factory=SeoData)
    thumbnails: ThumbnailData = Field(default_factory=ThumbnailData)
    thumbnail_images: ThumbnailGenerationData = Field(default_factory=ThumbnailGenerationData)
    plan: PlannerData = Field(default_factory=PlannerData)

    def stage_data(self, stage: WorkflowStage) -> Optional[StageData]:
        """Data record for a stage (None for the final review stage)."""
        field_name = STAGE_FIELDS.get(WorkflowStage(stage))
        return getattr(self, field_name) if field_name else None

    def with_stage_data(self, stage: WorkflowStage, **changes) -> "WorkflowState":
        """Return a new state with one stage's record updated."""
        field_name = STAGE_FIELDS[WorkflowStage(stage)]
        current = getattr(self, field_name)
        return self.model_copy(update={field_name: current.model_copy(update=changes)})

    def missing_prerequisites(self, stage: WorkflowStage) -> List[WorkflowStage]:
        """Earlier stages that have not produced output yet."""
        missing = []
        for earlier in WorkflowStage:
            if earlier >= stage:
                break
            data = self.stage_data(earlier)
            if data is not None and not data.has_output:
                missing.append(earlier)
        return missing


INITIAL_STATE = WorkflowState()

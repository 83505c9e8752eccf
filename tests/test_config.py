"""
Tests for Settings and Context

Tests for studio/config.py and studio/context.py
"""

import pytest

from producer.llm import generate_video_idea
from producer.media import generate_thumbnail_images
from producer.schemas import GenerateIdeaInput, GenerateThumbnailImagesInput
from studio.config import (
    DEFAULT_API_BASE_URL,
    MODEL_FAST,
    load_settings,
)
from studio.context import RunContext
from studio.errors import InvalidConfigError, MissingConfigError
from studio.models import ThumbnailConcept


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self):
        settings = load_settings(RunContext(secrets={"GEMINI_API_KEY": "k"}, use_environment=False))

        assert settings.api_key == "k"
        assert settings.api_base_url == DEFAULT_API_BASE_URL
        assert settings.model_fast == MODEL_FAST
        assert settings.max_retries == 3
        assert settings.retry_delay == 1.0
        assert settings.request_timeout == 120.0

    def test_missing_key(self):
        with pytest.raises(MissingConfigError) as exc_info:
            load_settings(RunContext(use_environment=False))

        assert exc_info.value.message == "API key not found in environment variables"

    def test_key_lookup_order(self):
        ctx = RunContext(
            secrets={"GOOGLE_API_KEY": "google", "API_KEY": "generic"},
            use_environment=False,
        )
        assert load_settings(ctx).api_key == "google"

        ctx = RunContext(secrets={"API_KEY": "generic"}, use_environment=False)
        assert load_settings(ctx).api_key == "generic"

    def test_overrides(self):
        ctx = RunContext(secrets={
            "GEMINI_API_KEY": "k",
            "TUBEFLOW_MODEL_FAST": "my-fast",
            "TUBEFLOW_MAX_RETRIES": "5",
            "TUBEFLOW_RETRY_DELAY": "0.25",
            "TUBEFLOW_API_BASE_URL": "https://proxy.test/v1/",
        }, use_environment=False)

        settings = load_settings(ctx)

        assert settings.model_fast == "my-fast"
        assert settings.max_retries == 5
        assert settings.retry_delay == 0.25
        assert settings.api_base_url == "https://proxy.test/v1"

    def test_unparseable_number(self):
        ctx = RunContext(
            secrets={"GEMINI_API_KEY": "k", "TUBEFLOW_MAX_RETRIES": "lots"},
            use_environment=False,
        )
        with pytest.raises(InvalidConfigError):
            load_settings(ctx)

    def test_out_of_range_number(self):
        ctx = RunContext(
            secrets={"GEMINI_API_KEY": "k", "TUBEFLOW_REQUEST_TIMEOUT": "0"},
            use_environment=False,
        )
        with pytest.raises(InvalidConfigError):
            load_settings(ctx)

    def test_key_not_in_repr(self):
        settings = load_settings(RunContext(secrets={"GEMINI_API_KEY": "super-secret"}, use_environment=False))
        assert "super-secret" not in repr(settings)


class TestMissingKeyBeforeNetwork:
    """A missing credential fails before any request is sent."""

    @pytest.mark.asyncio
    async def test_idea(self, ctx_without_key, fake_gemini):
        with pytest.raises(MissingConfigError):
            await generate_video_idea(ctx_without_key, GenerateIdeaInput(topic="urban gardening"))

        assert fake_gemini.requests == []

    @pytest.mark.asyncio
    async def test_thumbnail_fan_out(self, ctx_without_key, fake_gemini):
        concept = ThumbnailConcept(headline="GROW IT", visual_description="tomatoes", reasoning="color")

        with pytest.raises(MissingConfigError):
            await generate_thumbnail_images(ctx_without_key, GenerateThumbnailImagesInput(concept=concept))

        assert fake_gemini.requests == []


class TestRunContext:
    """Tests for RunContext."""

    def test_secret_falls_back_to_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")

        assert RunContext().get_secret("GEMINI_API_KEY") == "from-env"
        assert RunContext(secrets={"GEMINI_API_KEY": "explicit"}).get_secret("GEMINI_API_KEY") == "explicit"

    def test_environment_can_be_disabled(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        assert RunContext(use_environment=False).get_secret("GEMINI_API_KEY") is None

    def test_empty_secret_is_none(self):
        assert RunContext(secrets={"GEMINI_API_KEY": ""}, use_environment=False).get_secret("GEMINI_API_KEY") is None

    def test_config_lookup(self):
        ctx = RunContext(config={"aspect_ratio": "9:16"}, use_environment=False)

        assert ctx.get_config("aspect_ratio") == "9:16"
        assert ctx.get_config("missing", "default") == "default"

    def test_reports(self):
        ctx = RunContext(use_environment=False)
        ctx.report_input({"topic": "x"})
        ctx.report_output({"status": "success"})

        assert ctx.inputs == [{"topic": "x"}]
        assert ctx.last_output == {"status": "success"}

"""
Primary/fallback model routing.

A ModelRoute names a primary and a fallback model for one task plus the
condition under which a failed primary call is re-issued on the fallback.
Each model gets its own full retry budget: the primary is retried to
exhaustion first, then the router decides whether to switch.

Two routes are in use and their triggers differ on purpose:
- script writing falls back on ANY primary failure
- thumbnail images fall back only on permission-denied
"""
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from studio.config import StudioSettings
from studio.errors import BackendError, ErrorKind

from .retry import retry_with_backoff

logger = structlog.get_logger()

T = TypeVar("T")


def fallback_on_any_error(error: BaseException) -> bool:
    return True


def fallback_on_permission_denied(error: BaseException) -> bool:
    return isinstance(error, BackendError) and error.kind is ErrorKind.UNAUTHORIZED


@dataclass(frozen=True)
class ModelRoute:
    """Primary -> fallback model pair for one task."""
    task: str
    primary: str
    fallback: str
    should_fall_back: Callable[[BaseException], bool] = fallback_on_any_error

    async def run(
        self,
        primary: Callable[[str], Awaitable[T]],
        fallback: Optional[Callable[[str], Awaitable[T]]] = None,
        retries: int = 3,
        delay: float = 1.0,
        sleep=None,
    ) -> T:
        """
        Run the task on the primary model, switching to the fallback model
        when the primary's retries are exhausted and the trigger matches.

        Args:
            primary: Called with the model id; performs one attempt
            fallback: Same for the fallback model (defaults to primary's
                callable, for routes where both models share an endpoint)
            retries: Retry budget per model
            delay: Initial backoff delay per model
        """
        fallback = fallback or primary

        try:
            return await retry_with_backoff(
                lambda: primary(self.primary),
                retries=retries,
                delay=delay,
                operation=f"{self.task}:{self.primary}",
                sleep=sleep,
            )
        except Exception as e:
            if not self.should_fall_back(e):
                raise
            logger.warning(
                "model_fallback",
                task=self.task,
                primary=self.primary,
                fallback=self.fallback,
                error=str(e),
            )

        return await retry_with_backoff(
            lambda: fallback(self.fallback),
            retries=retries,
            delay=delay,
            operation=f"{self.task}:{self.fallback}",
            sleep=sleep,
        )


def script_route(settings: StudioSettings) -> ModelRoute:
    """Complex-reasoning model first, fast model on any failure."""
    return ModelRoute(
        task="script",
        primary=settings.model_complex,
        fallback=settings.model_fast,
        should_fall_back=fallback_on_any_error,
    )


def thumbnail_image_route(settings: StudioSettings) -> ModelRoute:
    """Rich image model first, classic image model on permission-denied."""
    return ModelRoute(
        task="thumbnail_image",
        primary=settings.model_image,
        fallback=settings.model_image_fallback,
        should_fall_back=fallback_on_permission_denied,
    )

"""Generation pipeline: staged diff -> provider -> message, with progress reporting."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ai_commit_msg.config import Config
from ai_commit_msg.cost import CostInfo, calculate_cost, format_duration_cost
from ai_commit_msg.git import DiffSource, GitAnalyzer, GitError
from ai_commit_msg.llm import Provider, ProviderError, ProviderResult, Usage, get_provider
from ai_commit_msg.output import Notifier, ProgressIndicator, TerminalKind, TerminalNotifier

logger = logging.getLogger(__name__)

NO_STAGED_CHANGES = "No staged changes to commit"

Callback = Callable[[bool, str], None]


@dataclass(frozen=True)
class GenerationRequest:
    config: Config
    diff: str

    def __post_init__(self):
        if not self.diff:
            raise ValueError("GenerationRequest needs a non-empty diff")


@dataclass(frozen=True)
class GenerationResult:
    """Final outcome of one generation. Exactly one of message/error is set."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    usage: Optional[Usage] = None
    cost: Optional[CostInfo] = None
    duration: Optional[float] = None


class Generator:
    """Runs generations. Collaborators are injected so tests can fake them."""

    def __init__(
        self,
        diff_source: Optional[DiffSource] = None,
        notifier: Optional[Notifier] = None,
        provider_factory: Callable[[str], Provider] = get_provider,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.diff_source = diff_source or GitAnalyzer()
        self.notifier = notifier or TerminalNotifier()
        self.provider_factory = provider_factory
        self.clock = clock

    async def generate(self, config: Config, callback: Optional[Callback] = None) -> GenerationResult:
        """Generate a commit message for the staged changes.

        The progress indicator ends in exactly one final notification and
        `callback(success, message_or_error)` fires exactly once.
        """
        logger.debug("Starting generation")
        progress = ProgressIndicator(self.notifier, notifications=config.notifications, clock=self.clock)
        if not progress.start(config.spinner_frames):
            progress.announce()

        try:
            try:
                diff = await self.diff_source.get_staged_diff(config.context_lines)
            except GitError as e:
                return self._fail(progress, TerminalKind.ERROR, f"Failed to get git diff: {e}", callback)

            if not diff.strip():
                return self._fail(progress, TerminalKind.WARNING, NO_STAGED_CHANGES, callback)

            request = GenerationRequest(config, diff)
            logger.debug("Calling AI API")
            started = self.clock()
            result = await self._call_provider(request)
            progress.stop()

            if not result.success:
                return self._fail(progress, TerminalKind.ERROR, result.error or "Unknown error", callback)

            duration = self.clock() - started
            cost = calculate_cost(result.usage, config)
            summary = format_duration_cost(duration, cost, config.cost_display)
            logger.debug("Generated message: %s...", result.message[:50])
            progress.finish(TerminalKind.SUCCESS, f"Commit message generated ({summary})")
            return _report(
                GenerationResult(True, message=result.message, usage=result.usage, cost=cost, duration=duration),
                callback,
            )
        finally:
            progress.stop()

    async def _call_provider(self, request: GenerationRequest) -> ProviderResult:
        try:
            provider = self.provider_factory(request.config.provider)
        except ProviderError as e:
            return ProviderResult.failure(str(e))
        return await provider.call(request.config, request.diff)

    def _fail(self, progress: ProgressIndicator, kind: TerminalKind, message: str,
              callback: Optional[Callback]) -> GenerationResult:
        progress.stop()
        logger.debug("Generation ended: %s", message)
        progress.finish(kind, message)
        return _report(GenerationResult(False, error=message), callback)


def _report(result: GenerationResult, callback: Optional[Callback]) -> GenerationResult:
    if callback:
        callback(result.success, result.message if result.success else result.error)
    return result


async def generate(config: Config, callback: Optional[Callback] = None) -> GenerationResult:
    """Run one generation against git and the terminal."""
    return await Generator().generate(config, callback)

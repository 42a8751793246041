"""Git Analyzer - Read the staged diff from git."""

from typing import Optional, Protocol

from ai_commit_msg.process import CommandResult, run_command


class GitError(Exception):
    """Raised when git operations fail. The message is git's own error text."""
    pass


class DiffSource(Protocol):
    async def get_staged_diff(self, context_lines: Optional[int] = None) -> str:
        ...


class GitAnalyzer:
    """Reads staged changes through the git executable."""

    def __init__(self, executable: str = "git"):
        self.executable = executable

    async def _run_git(self, *args: str) -> CommandResult:
        return await run_command(self.executable, *args)

    def diff_args(self, context_lines: Optional[int] = None) -> list[str]:
        args = ['diff', '--staged']
        if context_lines is not None and context_lines >= 0:
            args.append(f'-U{context_lines}')
        return args

    async def get_staged_diff(self, context_lines: Optional[int] = None) -> str:
        """Staged diff text; empty when nothing is staged."""
        result = await self._run_git(*self.diff_args(context_lines))
        if not result.ok:
            raise GitError(result.stderr.strip() or "Unknown error")
        return result.stdout

"""HTTP over curl. Requests are delegated to an external process."""

import logging
from typing import Mapping, Protocol

from ai_commit_msg.process import CommandResult, run_command

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Anything that can perform one HTTP request and report how it went."""

    async def request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: str | None = None,
    ) -> CommandResult:
        ...


class CurlTransport:
    """Runs curl for each request. The body is piped on stdin."""

    def __init__(self, executable: str = "curl"):
        self.executable = executable

    def build_args(self, method: str, url: str, headers: Mapping[str, str], has_body: bool) -> list[str]:
        args = [self.executable, "-X", method, url]
        for name, value in headers.items():
            args.extend(["-H", f"{name}: {value}"])
        if has_body:
            args.extend(["--data-binary", "@-"])
        args.extend(["--silent", "--show-error"])
        return args

    async def request(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: str | None = None,
    ) -> CommandResult:
        logger.debug("%s %s", method, url)
        args = self.build_args(method, url, headers, body is not None)
        return await run_command(*args, input_text=body)

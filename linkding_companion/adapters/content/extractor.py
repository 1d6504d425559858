"""Readable-content extraction.

Two interchangeable backends: trafilatura running in-process on HTML
fetched with httpx, or Mozilla's readability via the ``readability-cli``
npm package.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx
import trafilatura
from trafilatura.settings import use_config

from linkding_companion.domain.exceptions import ExtractionFailure

if TYPE_CHECKING:
    from linkding_companion.config.integrations import ContentConfig

logger = logging.getLogger(__name__)

TRAFILATURA_CONFIG = use_config()
TRAFILATURA_CONFIG.set("DEFAULT", "EXTRACTION_TIMEOUT", "30")

READABILITY_CLI_COMMAND = (
    "npx",
    "-y",
    "readability-cli",
    "--properties",
    "text-content",
    "--low-confidence=exit",
)


@runtime_checkable
class ContentExtractorProtocol(Protocol):
    async def extract(self, url: str) -> str:
        """Main readable text of the page at ``url``.

        Raises:
            ExtractionFailure: If the page cannot be fetched or has no readable content.
        """
        ...


class TrafilaturaExtractor:
    def __init__(
        self,
        *,
        timeout_sec: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout_sec
        self._transport = transport

    async def extract(self, url: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(
                    url,
                    headers={
                        "User-Agent": "Mozilla/5.0 (compatible; linkding-companion)",
                        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                    },
                    follow_redirects=True,
                )
                response.raise_for_status()
                html = response.text
        except httpx.HTTPError as e:
            raise ExtractionFailure(f"HTTP error: {e}", {"url": url}) from e

        # trafilatura is synchronous and CPU-bound
        extracted = await asyncio.to_thread(
            trafilatura.extract,
            html,
            url=url,
            include_comments=False,
            include_tables=False,
            favor_precision=True,
            config=TRAFILATURA_CONFIG,
        )
        text = (extracted or "").strip()
        if not text:
            raise ExtractionFailure("Could not extract content from page", {"url": url})
        return text


class ReadabilityCliExtractor:
    """Runs ``readability-cli`` as a subprocess.

    ``--low-confidence=exit`` makes the tool exit non-zero when the page is
    probably not an article; that is reported as ``ExtractionFailure``.
    The URL is passed as a separate argv entry, never through a shell.
    """

    def __init__(
        self,
        *,
        timeout_sec: float = 60.0,
        command: tuple[str, ...] = READABILITY_CLI_COMMAND,
    ) -> None:
        self._timeout = timeout_sec
        self._command = command

    async def extract(self, url: str) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                *self._command,
                url,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ExtractionFailure(f"Could not start {self._command[0]}: {e}", {"url": url}) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self._timeout)
        except TimeoutError as e:
            process.kill()
            await process.wait()
            raise ExtractionFailure(
                f"readability-cli timed out after {self._timeout}s", {"url": url}
            ) from e

        if process.returncode != 0:
            logger.debug(
                "readability_cli_failed",
                extra={
                    "url": url,
                    "exit_code": process.returncode,
                    "stderr": stderr.decode("utf-8", errors="replace")[:500],
                },
            )
            raise ExtractionFailure(
                f"readability-cli exited with status {process.returncode}",
                {"url": url, "exit_code": process.returncode},
            )

        text = stdout.decode("utf-8", errors="replace").strip()
        if not text:
            raise ExtractionFailure("readability-cli returned no content", {"url": url})
        return text


def build_extractor(config: ContentConfig) -> ContentExtractorProtocol:
    if config.extractor == "readability-cli":
        return ReadabilityCliExtractor(timeout_sec=config.timeout_sec)
    return TrafilaturaExtractor(timeout_sec=config.timeout_sec)

"""
GitHub contents API adapter for fetching upstream holiday source files.

This module wraps the two requests the pipeline needs against the contents
endpoint (a directory listing and a single file) behind a rate-limited async
client. Every outbound request first takes a permit from a PermitRateLimiter
owned by the fetcher, so a batch of concurrent fetches never exceeds one
request per configured interval.

Cancellation is cooperative: each operation accepts an optional
`asyncio.Event`; when it is set while the operation waits for a permit or for
the response, the operation raises FetchCancelledError.
"""

import asyncio
import logging
from typing import Any, Awaitable, Optional, TypeVar

import httpx

from constants import (
    APP_NAME,
    APP_VERSION,
    DEFAULT_REQUEST_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    GITHUB_API_URL,
    IGNORED_SOURCE_FILES,
    SOURCE_EXTENSION,
    UPSTREAM_COUNTRIES_PATH,
    UPSTREAM_OWNER,
    UPSTREAM_REPO,
)
from core.content import decode_content
from core.countries import code_from_filename, filename_for
from core.exceptions import (
    FetchCancelledError,
    FetchError,
    RemoteAPIError,
    UnknownCountryError,
)
from models import FileContent, FileEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _until_cancelled(work: Awaitable[T], cancel: Optional[asyncio.Event]) -> T:
    """
    Await `work`, raising FetchCancelledError if `cancel` fires first.

    The losing side is cancelled and awaited so no task outlives the call.
    """
    if cancel is None:
        return await work
    if cancel.is_set():
        if asyncio.iscoroutine(work):
            work.close()
        raise FetchCancelledError()

    work_task = asyncio.ensure_future(work)
    cancel_task = asyncio.ensure_future(cancel.wait())
    try:
        done, _ = await asyncio.wait(
            {work_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        for task in (work_task, cancel_task):
            if not task.done():
                task.cancel()
        await asyncio.gather(work_task, cancel_task, return_exceptions=True)

    if work_task in done:
        return work_task.result()
    raise FetchCancelledError()


class PermitRateLimiter:
    """
    Single-slot permit replenished on a fixed interval.

    The slot is an `asyncio.Queue` of size one. A refill task puts a permit,
    waits until a caller has taken it, then sleeps `interval` seconds before
    putting the next one. K acquisitions therefore span at least
    `(K-1) * interval` seconds, however many callers compete for them.

    The refill task starts lazily on the first `acquire`, inside the running
    event loop, and is stopped by `aclose`.

    Attributes:
        interval: Minimum number of seconds between two issued permits.
    """

    def __init__(self, interval: float = DEFAULT_REQUEST_INTERVAL):
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.interval = interval
        self._permits: Optional[asyncio.Queue[None]] = None
        self._refill_task: Optional[asyncio.Task[None]] = None

    async def acquire(self, cancel: Optional[asyncio.Event] = None) -> None:
        """
        Wait for a permit.

        Raises:
            FetchCancelledError: If `cancel` is set before a permit is issued.
        """
        permits = self._ensure_started()
        await _until_cancelled(permits.get(), cancel)
        permits.task_done()

    async def aclose(self) -> None:
        if self._refill_task is None:
            return
        self._refill_task.cancel()
        try:
            await self._refill_task
        except asyncio.CancelledError:
            pass
        self._refill_task = None
        self._permits = None

    def _ensure_started(self) -> asyncio.Queue[None]:
        if self._permits is None:
            self._permits = asyncio.Queue(maxsize=1)
        if self._refill_task is None or self._refill_task.done():
            self._refill_task = asyncio.create_task(self._refill(self._permits))
        return self._permits

    async def _refill(self, permits: asyncio.Queue[None]) -> None:
        while True:
            await permits.put(None)
            await permits.join()
            await asyncio.sleep(self.interval)


class GitHubFetcher:
    """
    Rate-limited client for the upstream repository's contents endpoint.

    Use as an async context manager; on exit it stops the rate limiter and
    closes the HTTP client if the fetcher created it.

    Attributes:
        owner: Repository owner on the code host.
        repo: Repository name.
        countries_path: Repository path holding one source file per country.
        limiter: The permit limiter guarding every outbound request.
    """

    def __init__(
        self,
        owner: str = UPSTREAM_OWNER,
        repo: str = UPSTREAM_REPO,
        countries_path: str = UPSTREAM_COUNTRIES_PATH,
        token: Optional[str] = None,
        interval: float = DEFAULT_REQUEST_INTERVAL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        base_url: str = GITHUB_API_URL,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.owner = owner
        self.repo = repo
        self.countries_path = countries_path
        self.limiter = PermitRateLimiter(interval)

        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": f"{APP_NAME}/{APP_VERSION}",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self.client.headers.update(headers)

    async def __aenter__(self) -> "GitHubFetcher":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.limiter.aclose()
        if self._owns_client:
            await self.client.aclose()

    async def fetch_directory_listing(
        self, path: Optional[str] = None, cancel: Optional[asyncio.Event] = None
    ) -> list[FileEntry]:
        """
        List the entries of a repository directory.

        Args:
            path: Repository path, defaulting to the countries directory.
            cancel: Optional cancellation signal.

        Returns:
            File entries in the order the API returned them.

        Raises:
            RemoteAPIError: On a non-2xx response.
            FetchError: On transport failure or an unexpected body shape.
            FetchCancelledError: If `cancel` fires first.
        """
        payload = await self._get_json(self._contents_url(path), cancel)
        if not isinstance(payload, list):
            raise FetchError(message="Expected a directory listing from contents API")
        return [
            FileEntry(
                name=item.get("name", ""),
                type=item.get("type", ""),
                path=item.get("path", ""),
            )
            for item in payload
            if isinstance(item, dict)
        ]

    async def fetch_file_content(
        self, path: str, cancel: Optional[asyncio.Event] = None
    ) -> FileContent:
        """
        Fetch one file's encoded body from the contents endpoint.

        Raises:
            RemoteAPIError: On a non-2xx response.
            FetchError: On transport failure or an unexpected body shape.
            FetchCancelledError: If `cancel` fires first.
        """
        payload = await self._get_json(self._contents_url(path), cancel)
        if not isinstance(payload, dict) or "content" not in payload:
            raise FetchError(message=f"Expected file content for '{path}'")
        return FileContent(
            content=payload["content"], encoding=payload.get("encoding", "")
        )

    async def validate_token(self, cancel: Optional[asyncio.Event] = None) -> str:
        """
        Check the configured token against the authenticated-user endpoint.

        Returns:
            The login of the authenticated user.

        Raises:
            RemoteAPIError: If the token is rejected.
        """
        payload = await self._get_json("/user", cancel)
        login = payload.get("login", "") if isinstance(payload, dict) else ""
        logger.debug("Token belongs to '%s'", login)
        return login

    async def list_country_codes(
        self, cancel: Optional[asyncio.Event] = None
    ) -> list[str]:
        """
        List the country codes with a source file upstream.

        Only plain files with the source extension count; index files and
        filenames outside the country table are dropped.
        """
        codes: list[str] = []
        for entry in await self.fetch_directory_listing(cancel=cancel):
            name = entry["name"]
            if entry["type"] != "file" or not name.endswith(SOURCE_EXTENSION):
                continue
            if name in IGNORED_SOURCE_FILES:
                continue
            try:
                codes.append(code_from_filename(name))
            except UnknownCountryError:
                logger.debug("Ignoring unmapped source file '%s'", name)
        return sorted(codes)

    async def fetch_country_source(
        self, country_code: str, cancel: Optional[asyncio.Event] = None
    ) -> str:
        """
        Fetch and decode the source file of one country.

        Raises:
            UnknownCountryError: If the code is not in the country table.
            DecodeError: If the body is not valid base64 UTF-8.
        """
        path = f"{self.countries_path}/{filename_for(country_code)}"
        file_content = await self.fetch_file_content(path, cancel)
        return decode_content(file_content["content"], file_content["encoding"])

    def _contents_url(self, path: Optional[str]) -> str:
        return f"/repos/{self.owner}/{self.repo}/contents/{path or self.countries_path}"

    async def _get_json(self, url: str, cancel: Optional[asyncio.Event]) -> Any:
        await self.limiter.acquire(cancel)
        logger.debug("GET %s", url)
        try:
            response = await _until_cancelled(self.client.get(url), cancel)
        except httpx.HTTPError as e:
            raise FetchError(
                message=f"Request to {url} failed", original_exception=e
            ) from e

        if not response.is_success:
            raise RemoteAPIError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(
                message=f"Malformed JSON from {url}", original_exception=e
            ) from e

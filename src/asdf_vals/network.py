"""
HTTP client for release assets.

Every fetch goes through `with_retry`, so archives and checksum manifests
share the same bounded, fixed-delay retry behaviour.
"""

import importlib.metadata
from pathlib import Path
from typing import Dict, Optional, Union

import requests
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from asdf_vals.config import PluginConfig
from asdf_vals.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
    PLUGIN_NAME,
)
from asdf_vals.log_utils import console, logger
from asdf_vals.retry import with_retry

Pathish = Union[str, Path]

# Cache for the User-Agent string to avoid repeated metadata lookups
_USER_AGENT_CACHE: Optional[str] = None


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `asdf-vals/{version}`, or `asdf-vals/unknown` when the
        package metadata is unavailable.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version(PLUGIN_NAME)
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"{PLUGIN_NAME}/{app_version}"

    return _USER_AGENT_CACHE


def build_headers(config: PluginConfig) -> Dict[str, str]:
    """
    Build the default request headers, adding token authentication when configured.

    A missing token is not an error; requests are then made anonymously.
    """
    headers = {"User-Agent": get_user_agent()}
    if config.github_api_token:
        logger.debug("Using GitHub API token for authentication")
        headers["Authorization"] = f"token {config.github_api_token}"
    return headers


class NetworkClient:
    """Fetches URLs to local files with retry, resume, and optional progress."""

    def __init__(
        self,
        config: PluginConfig,
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_REQUEST_TIMEOUT,
    ):
        self.config = config
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()
        self._session.headers.update(build_headers(config))

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "NetworkClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def fetch(
        self,
        url: str,
        destination: Pathish,
        resume: bool = False,
        progress: bool = False,
    ) -> Path:
        """
        Download `url` into `destination`, retrying transient failures.

        Parameters:
            url: Remote URL to fetch.
            destination: Local file to write.
            resume: Continue a partial file with a Range request instead of restarting.
            progress: Render a progress bar on stderr.

        Returns:
            Path: The destination path.

        Raises:
            requests.RequestException or OSError from the last attempt once
            `config.max_retries` attempts have failed.
        """
        target = Path(destination)

        def _attempt(_attempt_number: int) -> Path:
            return self._fetch_once(url, target, resume, progress)

        return with_retry(
            _attempt,
            max_attempts=self.config.max_retries,
            delay=self.config.retry_delay,
            retry_on=(requests.RequestException, OSError),
            description=f"GET {url}",
        )

    def _fetch_once(
        self, url: str, target: Path, resume: bool, progress: bool
    ) -> Path:
        headers: Dict[str, str] = {}
        offset = 0
        if resume and target.is_file():
            offset = target.stat().st_size
            if offset:
                headers["Range"] = f"bytes={offset}-"
                logger.debug(f"Resuming {target.name} from byte {offset}")

        response = self._session.get(
            url, headers=headers, stream=True, timeout=self.timeout
        )
        try:
            logger.debug(
                f"Received HTTP response status code: {response.status_code} for URL: {url}"
            )
            if offset and response.status_code == 416:
                # Range not satisfiable: the partial file is already complete.
                logger.debug(f"{target.name} already fully downloaded")
                return target
            response.raise_for_status()

            append = bool(offset) and response.status_code == 206
            if not append:
                offset = 0

            target.parent.mkdir(parents=True, exist_ok=True)
            total = _content_length(response)
            if total is not None:
                total += offset

            with open(target, "ab" if append else "wb") as handle:
                if progress:
                    self._write_with_progress(response, handle, target.name, offset, total)
                else:
                    for chunk in response.iter_content(chunk_size=DEFAULT_CHUNK_SIZE):
                        if chunk:
                            handle.write(chunk)
        finally:
            response.close()

        logger.debug(f"Finished downloading {url} to {target}")
        return target

    @staticmethod
    def _write_with_progress(response, handle, name, completed, total) -> None:
        columns = (
            TextColumn("{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
        )
        with Progress(*columns, console=console, transient=True) as bar:
            task = bar.add_task(name, total=total, completed=completed)
            for chunk in response.iter_content(chunk_size=DEFAULT_CHUNK_SIZE):
                if chunk:
                    handle.write(chunk)
                    bar.update(task, advance=len(chunk))


def _content_length(response) -> Optional[int]:
    raw = getattr(response, "headers", {}).get("Content-Length")
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None

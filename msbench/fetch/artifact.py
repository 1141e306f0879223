"""
Artifact retrieval.

The artifact source is either a remote ``http(s)`` URL, downloaded in full
before returning, or a local path (plain or ``file://``) that is used in place
without touching the network. Which one applies is decided from the shape of
the source string alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable
from urllib.parse import unquote, urlparse

import httpx

_logger = logging.getLogger(__name__)

REMOTE_SCHEMES = frozenset({"http", "https"})
CHUNK_SIZE = 64 * 1024


class FetchFailed(Exception):
    """The artifact could not be retrieved."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {source}: {reason}")
        self.source = source
        self.reason = reason


def is_remote(source: str) -> bool:
    return urlparse(source).scheme.lower() in REMOTE_SCHEMES


def local_path(source: str) -> Path:
    """Resolve a ``file://`` URL or plain path to a filesystem path."""
    parsed = urlparse(source)
    if parsed.scheme.lower() == "file":
        return Path(unquote(parsed.path))
    return Path(source)


@dataclass(slots=True)
class ArtifactFetcher:
    """
    Retrieve the benchmarked artifact.

    Args:
        auth_header: Header name used to carry the token, when one is given.
        timeout: Download timeout in seconds; ``None`` blocks indefinitely.
        client_factory: Builds the HTTP client; overridden in tests.
    """

    auth_header: str = "User-Agent"
    timeout: float | None = None
    client_factory: Callable[..., httpx.Client] = httpx.Client

    def fetch(
        self, source: str, destination: Path, *, token: str | None = None
    ) -> Path:
        """Make the artifact available locally and return its path."""
        if not is_remote(source):
            return self._resolve_local(source)
        return self._download(source, destination, token)

    def _resolve_local(self, source: str) -> Path:
        path = local_path(source)
        if not path.is_file():
            raise FetchFailed(source, "local artifact does not exist")
        return path.resolve()

    def _download(self, source: str, destination: Path, token: str | None) -> Path:
        headers = {self.auth_header: token} if token is not None else {}
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self.client_factory(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                event_hooks={"request": [self._token_guard(source)]},
            ) as client:
                with client.stream("GET", source, headers=headers) as response:
                    response.raise_for_status()
                    # Overwrite whatever is already there.
                    with destination.open("wb") as handle:
                        for chunk in response.iter_bytes(CHUNK_SIZE):
                            handle.write(chunk)
        except httpx.HTTPStatusError as exc:
            destination.unlink(missing_ok=True)
            raise FetchFailed(
                source, f"HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, OSError) as exc:
            destination.unlink(missing_ok=True)
            raise FetchFailed(source, str(exc) or type(exc).__name__) from exc

        _logger.debug("Downloaded %s to %s", source, destination)
        return destination

    def _token_guard(self, source: str) -> Callable[[httpx.Request], None]:
        """Drop the token header from redirect hops that leave the source host."""
        origin = httpx.URL(source)

        def strip_foreign(request: httpx.Request) -> None:
            url = request.url
            if (url.scheme, url.host, url.port) != (
                origin.scheme,
                origin.host,
                origin.port,
            ):
                request.headers.pop(self.auth_header, None)

        return strip_foreign

"""Template fetcher.

Downloads a snapshot of the template repository as a GitHub tarball and
unpacks it into the new project directory. No git history is carried over
and nothing is cached between runs.

Typical usage::

    fetcher = TemplateFetcher("Tanishk-P/React-Native-Boiler-Plate")
    await fetcher.fetch(Path("./MyApp"))
"""

from __future__ import annotations

import asyncio
import io
import tarfile
from pathlib import Path, PurePosixPath

import httpx
from rich.markup import escape

from .utils import console

GITHUB_API_URL = "https://api.github.com"


class FetchError(Exception):
    """Raised when the template cannot be downloaded or unpacked."""

    def __init__(self, message: str, repo: str = "") -> None:
        self.repo = repo
        super().__init__(message)


def _strip_top_level(name: str) -> PurePosixPath | None:
    """Drop the ``<owner>-<repo>-<sha>/`` prefix GitHub puts on every member."""
    parts = PurePosixPath(name).parts
    if len(parts) <= 1:
        return None
    return PurePosixPath(*parts[1:])


def _is_safe(relative: PurePosixPath) -> bool:
    return not relative.is_absolute() and ".." not in relative.parts


def extract_tarball(data: bytes, target_dir: Path) -> int:
    """Unpack a GitHub tarball into *target_dir*, stripping the top-level folder.

    Existing files in *target_dir* are overwritten.

    Returns:
        Number of regular files written.

    Raises:
        FetchError: If the archive is unreadable or contains unsafe members.
    """
    target_dir.mkdir(parents=True, exist_ok=True)
    root = target_dir.resolve()
    written = 0

    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as archive:
            for member in archive.getmembers():
                relative = _strip_top_level(member.name)
                if relative is None:
                    continue
                if not _is_safe(relative):
                    raise FetchError(f"Unsafe path in template archive: {member.name}")

                destination = root / relative
                if member.isdir():
                    destination.mkdir(parents=True, exist_ok=True)
                elif member.issym():
                    link_target = (destination.parent / member.linkname).resolve()
                    if not link_target.is_relative_to(root):
                        raise FetchError(
                            f"Symlink escapes the project directory: {member.name}"
                        )
                    destination.parent.mkdir(parents=True, exist_ok=True)
                    if destination.is_symlink() or destination.exists():
                        destination.unlink()
                    destination.symlink_to(member.linkname)
                elif member.isfile():
                    source = archive.extractfile(member)
                    if source is None:
                        continue
                    destination.parent.mkdir(parents=True, exist_ok=True)
                    destination.write_bytes(source.read())
                    destination.chmod(member.mode & 0o777 | 0o600)
                    written += 1
    except tarfile.TarError as exc:
        raise FetchError(f"Template archive is corrupt: {exc}") from exc

    return written


class TemplateFetcher:
    """Materialises the template repository on disk.

    The client uses ``httpx.AsyncClient`` against the GitHub REST API, which
    redirects ``/repos/<repo>/tarball[/<ref>]`` to the archive download.
    """

    def __init__(
        self,
        repo: str,
        ref: str = "",
        timeout: int = 60,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.repo = repo
        self.ref = ref
        self.timeout = timeout
        self._transport = transport

    @property
    def tarball_url(self) -> str:
        url = f"{GITHUB_API_URL}/repos/{self.repo}/tarball"
        if self.ref:
            url = f"{url}/{self.ref}"
        return url

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            follow_redirects=True,
            headers={"Accept": "application/vnd.github+json"},
            transport=self._transport,
        )

    async def download(self) -> bytes:
        """Download the template tarball.

        Raises:
            FetchError: On connection errors, timeouts or non-2xx responses.
        """
        try:
            async with self._client() as client:
                response = await client.get(self.tarball_url)
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"GitHub returned HTTP {exc.response.status_code} for {self.repo}",
                repo=self.repo,
            ) from exc
        except httpx.TimeoutException as exc:
            raise FetchError(
                f"Download of {self.repo} timed out after {self.timeout}s", repo=self.repo
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"Could not download {self.repo}: {exc}", repo=self.repo) from exc

    async def fetch(self, target_dir: Path) -> Path:
        """Download the template and unpack it into *target_dir*.

        Returns:
            The resolved project directory.
        """
        console.print(f"  Downloading [bold]{escape(self.repo)}[/bold]...")
        data = await self.download()
        count = await asyncio.to_thread(extract_tarball, data, target_dir)
        console.print(f"  [green]+[/green] Extracted {count} file(s) into {escape(str(target_dir))}")
        return target_dir.resolve()

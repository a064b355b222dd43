from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path

import httpx

from shellpref_setup.core import Context
from shellpref_setup.errors import AssetFetchFailed, CommandFailed

DEFAULT_TIMEOUT: float = 60.0

USER_AGENT: str = "shellpref-setup/0.1"

MESLO_URL = "https://github.com/ryanoasis/nerd-fonts/releases/download/v3.2.1/Meslo.zip"
MESLO_MARKER = "MesloLGSNerdFont-Regular.ttf"
P10K_URL = "https://github.com/romkatv/powerlevel10k.git"


@dataclass(frozen=True)
class FetchedAsset:
    url: str
    destination_dir: Path
    # File (relative to destination_dir) whose presence means the archive is already unpacked.
    marker: str
    timeout: float = DEFAULT_TIMEOUT
    refresh_font_cache: bool = False

    @property
    def artifact(self) -> Path:
        return self.destination_dir / self.marker


@dataclass(frozen=True)
class ThemeCheckout:
    repo_url: str
    destination: Path
    depth: int = 1


def _download(url: str, dest: Path, *, timeout: float, client: httpx.Client | None) -> int:
    own_client = client is None
    if client is None:
        client = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )
    size = 0
    try:
        with client.stream("GET", url) as resp:
            resp.raise_for_status()
            with dest.open("wb") as f:
                for chunk in resp.iter_bytes():
                    f.write(chunk)
                    size += len(chunk)
    except httpx.TimeoutException as e:
        raise AssetFetchFailed(f"Timed out after {timeout:g}s downloading {url}") from e
    except httpx.HTTPStatusError as e:
        raise AssetFetchFailed(f"HTTP {e.response.status_code} from {url}") from e
    except httpx.HTTPError as e:
        raise AssetFetchFailed(f"Download of {url} failed: {e}") from e
    except OSError as e:
        raise AssetFetchFailed(f"Cannot store download of {url} in {dest}: {e}") from e
    finally:
        if own_client:
            client.close()
    return size


def fetch(ctx: Context, asset: FetchedAsset, *, client: httpx.Client | None = None) -> str:
    if asset.artifact.exists():
        return f"{asset.marker} already present in {asset.destination_dir}."

    if ctx.runner.dry_run:
        return f"Would download {asset.url} into {asset.destination_dir}."

    try:
        asset.destination_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise AssetFetchFailed(f"Cannot create {asset.destination_dir}: {e}") from e

    with tempfile.TemporaryDirectory(prefix="shellpref-setup-") as tmp:
        archive = Path(tmp) / (asset.url.rsplit("/", 1)[-1] or "download")
        ctx.logger.debug("GET %s", asset.url)
        size = _download(asset.url, archive, timeout=asset.timeout, client=client)
        if size == 0:
            raise AssetFetchFailed(f"Downloaded 0 bytes from {asset.url}")
        ctx.logger.debug("Fetched %d bytes from %s", size, asset.url)

        try:
            ctx.runner.run(
                ["unzip", "-o", "-q", str(archive), "-d", str(asset.destination_dir)],
                check=True,
            )
        except CommandFailed as e:
            raise AssetFetchFailed(f"Cannot unpack {archive.name}: {e}") from e

    if not asset.artifact.exists():
        raise AssetFetchFailed(f"{asset.url} did not contain {asset.marker}")

    if asset.refresh_font_cache:
        try:
            ctx.runner.run(["fc-cache", "-f", str(asset.destination_dir)], check=True)
        except CommandFailed as e:
            raise AssetFetchFailed(f"Font cache refresh failed: {e}") from e

    return f"Installed {asset.marker} into {asset.destination_dir}."


def clone_theme(ctx: Context, checkout: ThemeCheckout) -> str:
    if checkout.destination.exists():
        return f"{checkout.destination} already exists."
    try:
        ctx.runner.run(
            [
                "git",
                "clone",
                f"--depth={checkout.depth}",
                checkout.repo_url,
                str(checkout.destination),
            ],
            check=True,
        )
    except CommandFailed as e:
        raise AssetFetchFailed(f"Cannot clone {checkout.repo_url}: {e}") from e
    if ctx.runner.dry_run:
        return f"Would clone {checkout.repo_url} into {checkout.destination}."
    return f"Cloned {checkout.repo_url} into {checkout.destination}."

"""
Offline dictionary archive acquisition.

Picks the mirror closest to the user, downloads the zip archive with a
progress bar and extracts it next to the live store.
"""

import asyncio
import zipfile
from pathlib import Path
from typing import Iterable, List, Optional, Union

import requests
from tqdm import tqdm

from lexicon_hub.config.settings import Settings
from lexicon_hub.exceptions import MigrationError
from lexicon_hub.utils.logging import get_logger

logger = get_logger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024
IP_LOOKUP_TIMEOUT_SECONDS = 10


def choose_archive_url(session: requests.Session, settings: Settings) -> str:
    """
    Return the CN mirror for users in China or when detection fails,
    the global mirror otherwise.
    """
    try:
        response = session.get(settings.ip_lookup_url, timeout=IP_LOOKUP_TIMEOUT_SECONDS)
        response.raise_for_status()
        country = str(response.json().get("country", ""))
    except (requests.RequestException, ValueError, AttributeError) as e:
        logger.warning(
            "archive.ip_lookup_failed", error_type=type(e).__name__, fallback="cn"
        )
        return settings.archive_url_cn

    if country.upper() == "CN":
        logger.info("archive.mirror_selected", mirror="cn", country=country)
        return settings.archive_url_cn
    logger.info("archive.mirror_selected", mirror="global", country=country)
    return settings.archive_url_global


def download_archive(
    url: str,
    dest: Union[str, Path],
    session: requests.Session,
    *,
    timeout: int = 60,
    progress: bool = True,
) -> Path:
    """
    Stream url into dest.

    A partially written file is removed if the transfer fails.

    Raises:
        MigrationError: On network or HTTP failure.
    """
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    logger.info("archive.download_started", url=url, dest=str(dest))

    try:
        with session.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            total = int(response.headers.get("content-length", 0) or 0)
            with open(dest, "wb") as fh, tqdm(
                total=total or None,
                unit="B",
                unit_scale=True,
                desc="Downloading",
                disable=not progress,
            ) as bar:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
                        bar.update(len(chunk))
    except requests.RequestException as e:
        dest.unlink(missing_ok=True)
        raise MigrationError(f"Failed to download {url}: {e}", original_error=e) from e

    logger.info("archive.download_completed", dest=str(dest), size=dest.stat().st_size)
    return dest


def _extract_sync(zip_path: Path, dest: Path) -> List[Path]:
    dest_root = dest.resolve()
    extracted: List[Path] = []
    with zipfile.ZipFile(zip_path) as archive:
        for member in archive.infolist():
            target = (dest_root / member.filename).resolve()
            if target != dest_root and dest_root not in target.parents:
                raise MigrationError(
                    f"Archive member escapes destination: {member.filename}"
                )
            archive.extract(member, dest_root)
            if not member.is_dir():
                extracted.append(target)
    return extracted


async def extract_archive(zip_path: Union[str, Path], dest: Union[str, Path]) -> List[Path]:
    """
    Extract zip_path into dest off the event loop.

    Returns:
        Paths of extracted files.

    Raises:
        MigrationError: If the archive is corrupt or a member would be
            written outside dest.
    """
    zip_path, dest = Path(zip_path), Path(dest)
    dest.mkdir(parents=True, exist_ok=True)
    try:
        extracted = await asyncio.to_thread(_extract_sync, zip_path, dest)
    except zipfile.BadZipFile as e:
        raise MigrationError(f"Corrupt archive {zip_path}: {e}", original_error=e) from e
    logger.info("archive.extracted", zip_path=str(zip_path), files=len(extracted))
    return extracted


def find_legacy_database(
    directory: Union[str, Path], exclude: Iterable[Union[str, Path]] = ()
) -> Optional[Path]:
    """First *.db file in directory that is not one of exclude (the live store)."""
    excluded = {Path(p).resolve() for p in exclude}
    for candidate in sorted(Path(directory).glob("*.db")):
        if candidate.is_file() and candidate.resolve() not in excluded:
            return candidate
    return None

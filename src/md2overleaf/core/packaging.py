"""Zip the staging tree, upload it and build the Overleaf deep link."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote
import uuid
import zipfile

import requests

from .config import DEFAULT_UPLOAD_HOST
from .exceptions import PackagingError, UploadError


logger = logging.getLogger(__name__)

OVERLEAF_DOCS_URL = "https://www.overleaf.com/docs"
OVERLEAF_ENGINE = "xelatex"
MAX_RESPONSE_BYTES = 32 * 1024 * 1024

# Characters encodeURIComponent leaves untouched besides unreserved ones.
_URI_COMPONENT_SAFE = "!~*'()"


def package_stage(stage_dir: Path, work_dir: Path) -> Path:
    """Archive ``stage_dir`` into a uniquely named zip file under ``work_dir``."""
    archive = work_dir / f"{uuid.uuid4()}.zip"
    try:
        work_dir.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as bundle:
            for path in sorted(stage_dir.rglob("*")):
                if path.is_file():
                    bundle.write(path, arcname=path.relative_to(stage_dir).as_posix())
    except OSError as exc:
        raise PackagingError(f"Unable to archive '{stage_dir}': {exc}") from exc
    logger.info("Packaged %s into %s", stage_dir, archive)
    return archive


def normalise_endpoint(endpoint: str | None) -> str:
    """Strip blanks and trailing slashes, falling back to the default host."""
    host = (endpoint or "").strip().rstrip("/")
    return host or DEFAULT_UPLOAD_HOST


def parse_upload_response(body: str) -> str:
    """Return the URL announced by the upload host or raise :class:`UploadError`."""
    trimmed = body.strip()
    if not trimmed.startswith("http"):
        raise UploadError(f"Upload failed: {body}", response=body)
    return trimmed.split()[0]


def upload_archive(
    archive: Path,
    endpoint: str | None = DEFAULT_UPLOAD_HOST,
    *,
    session: requests.Session | None = None,
    timeout: float | None = None,
    max_response: int = MAX_RESPONSE_BYTES,
) -> str:
    """POST ``archive`` as the multipart ``file`` field and return its public URL."""
    target = normalise_endpoint(endpoint)
    client = session or requests.Session()
    try:
        with archive.open("rb") as handle:
            response = client.post(
                target,
                files={"file": (archive.name, handle, "application/zip")},
                timeout=timeout,
            )
    except OSError as exc:
        raise UploadError(f"Unable to read archive '{archive}': {exc}") from exc
    except requests.RequestException as exc:
        raise UploadError(f"Upload to {target} failed: {exc}") from exc

    if len(response.content) > max_response:
        raise UploadError(f"Upload response from {target} exceeds {max_response} bytes")

    url = parse_upload_response(response.text)
    logger.info("Uploaded %s to %s", archive.name, url)
    return url


def build_overleaf_url(archive_url: str, name: str) -> str:
    """Return the Overleaf link that imports ``archive_url`` as project ``name``."""
    snip_uri = quote(archive_url, safe=_URI_COMPONENT_SAFE)
    project = quote(name, safe=_URI_COMPONENT_SAFE)
    return f"{OVERLEAF_DOCS_URL}?snip_uri={snip_uri}&engine={OVERLEAF_ENGINE}&name={project}"


__all__ = [
    "MAX_RESPONSE_BYTES",
    "OVERLEAF_DOCS_URL",
    "OVERLEAF_ENGINE",
    "build_overleaf_url",
    "normalise_endpoint",
    "package_stage",
    "parse_upload_response",
    "upload_archive",
]

"""
Filesystem implementation of the Reference Store.

Every blob lands in a fresh, timestamped file under a session-scoped
scratch directory; only the small ContentReference is kept on the session
record.

Directory structure:
{cwd}/{state_dir}/temp/{session_id}/
    {stage}_{kind}_{timestamp}.{ext}
"""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from stageguard.domain.exceptions import ReferenceReadFailure
from stageguard.domain.interfaces import ReferenceStoreInterface
from stageguard.domain.models import ContentReference

logger = logging.getLogger(__name__)

SUMMARY_CHARS = 200
TRUNCATION_MARKER = "..."
PREVIEW_FIELDS = 3


def summarize(content: Any, limit: int = SUMMARY_CHARS) -> str:
    """
    Short human-readable summary.

    Text is truncated; lists and dicts are described structurally, since
    cutting serialized JSON mid-token tells a reviewer nothing.
    """
    if isinstance(content, list | tuple):
        return f"{len(content)} items"
    if isinstance(content, dict):
        keys = [str(key) for key in content]
        more = TRUNCATION_MARKER if len(keys) > PREVIEW_FIELDS else ""
        return f"{len(keys)} fields: {', '.join(keys[:PREVIEW_FIELDS])}{more}"
    text = "" if content is None else str(content)
    if len(text) > limit:
        return text[:limit] + TRUNCATION_MARKER
    return text


def _serialize(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(content, indent=2, ensure_ascii=False)


def _timestamp() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H-%M-%S-%fZ")


class FilesystemReferenceStore(ReferenceStoreInterface):
    """Write-once content addressing per (session, stage, kind)."""

    def __init__(self, state_dir: str = ".stageguard", summary_chars: int = SUMMARY_CHARS):
        """
        Args:
            state_dir: State directory, relative to each session's cwd
            summary_chars: Summary cap for text content
        """
        self._state_dir = state_dir
        self._summary_chars = summary_chars

    def _temp_dir(self, cwd: str, session_id: str) -> Path:
        return Path(cwd) / self._state_dir / "temp" / session_id

    def _fresh_path(self, directory: Path, stem: str, extension: str) -> Path:
        """Never reuse an existing name, even within one timestamp tick."""
        path = directory / f"{stem}.{extension}"
        counter = 1
        while path.exists():
            path = directory / f"{stem}-{counter}.{extension}"
            counter += 1
        return path

    def put(
        self,
        session_id: str,
        cwd: str,
        stage: str,
        kind: str,
        content: Any,
        extension: str = "md",
    ) -> ContentReference:
        directory = self._temp_dir(cwd, session_id)
        directory.mkdir(parents=True, exist_ok=True)

        path = self._fresh_path(directory, f"{stage}_{kind}_{_timestamp()}", extension)
        text = _serialize(content)
        # "x" mode: fail rather than overwrite
        with open(path, "x", encoding="utf-8") as f:
            f.write(text)

        reference = ContentReference(
            summary=summarize(content, self._summary_chars),
            file_path=str(path.relative_to(cwd)),
            size=len(text.encode("utf-8")),
            last_updated=datetime.now(UTC).isoformat(),
        )
        logger.debug(
            "Stored %s/%s for session %s (%d bytes) at %s",
            stage,
            kind,
            session_id,
            reference.size,
            reference.file_path,
        )
        return reference

    def get(self, cwd: str, reference: ContentReference) -> str:
        path = Path(cwd) / reference.file_path
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError as e:
            raise ReferenceReadFailure(reference.file_path, "missing") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ReferenceReadFailure(reference.file_path, str(e)) from e

"""Audio attachment service.

Resolves an audio file chosen by the author into an :class:`AudioFile`
descriptor ``{name, url}``. The core only stores the descriptor; no
transcoding happens here. :class:`SimulatedAudioUploader` stands in for a
cloud upload in local development.
"""

import asyncio
import logging
import os
from pathlib import PurePath
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote

from darija_lessons.config import get_settings
from darija_lessons.exceptions import AudioUploadError
from darija_lessons.schemas.activity import AudioFile
from darija_lessons.services.ids import new_id

logger = logging.getLogger(__name__)


@runtime_checkable
class AudioUploader(Protocol):
    """Collaborator that stores an audio file and returns its descriptor."""

    async def upload(self, file: Any) -> AudioFile: ...


def audio_file_name(file: Any) -> str:
    """Best-effort file name for a path, an upload object or an open file."""
    if isinstance(file, (str, os.PathLike)):
        raw = os.fspath(file)
    else:
        raw = getattr(file, "filename", None) or getattr(file, "name", None) or ""
    return PurePath(str(raw)).name if raw else ""


class SimulatedAudioUploader:
    """Pretend upload: waits, then returns a URL under ``audio_base_url``.

    Args:
        base_url: URL prefix; defaults to ``Settings.audio_base_url``.
        delay_seconds: Simulated latency; defaults to
            ``Settings.audio_upload_delay_seconds``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        delay_seconds: float | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.audio_base_url).rstrip("/")
        self.delay_seconds = (
            settings.audio_upload_delay_seconds if delay_seconds is None else delay_seconds
        )

    async def upload(self, file: Any) -> AudioFile:
        """Resolve *file* into an :class:`AudioFile`.

        Raises:
            AudioUploadError: If the file has no usable name.
        """
        name = audio_file_name(file)
        if not name:
            raise AudioUploadError("Audio file has no name")

        await asyncio.sleep(self.delay_seconds)
        url = f"{self.base_url}/{new_id()}/{quote(name)}"
        logger.info("Audio uploaded: name=%s url=%s", name, url)
        return AudioFile(name=name, url=url)

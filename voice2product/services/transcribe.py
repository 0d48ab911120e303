import logging
from pathlib import Path

from voice2product.config import TRANSCRIBE_LANGUAGE, TRANSCRIBE_MODEL, TRANSCRIBE_PROMPT
from voice2product.services.groq_client import CollaboratorError, get_client

log = logging.getLogger(__name__)


def transcribe_audio(path: str | Path, filename: str | None = None) -> str:
    """Speech-to-text for one uploaded recording. Empty string means no speech."""
    p = Path(path)
    client = get_client()
    try:
        with open(p, "rb") as fh:
            rsp = client.audio.transcriptions.create(
                file=(filename or p.name, fh),
                model=TRANSCRIBE_MODEL,
                prompt=TRANSCRIBE_PROMPT,
                response_format="json",
                language=TRANSCRIBE_LANGUAGE,
                temperature=0.0,
            )
    except Exception as e:
        log.error("Transcription failed for %s: %s", filename or p.name, e)
        raise CollaboratorError(f"Transcription failed: {e}") from e
    return (getattr(rsp, "text", "") or "").strip()

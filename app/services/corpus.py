# =============================================================================
# Corpus Context — Startup-Loaded Domain Knowledge
# =============================================================================
#
# The corpus is a single text file (the startup directory) read once when
# the process starts. It is wrapped in a frozen dataclass and handed by
# reference to every stage that needs it; nothing ever writes to it, so
# concurrent requests read it without locking.
#
# A missing or unreadable file is fatal: init_corpus() raises during the
# FastAPI lifespan and the server never starts accepting requests.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from app.config import settings

logger = logging.getLogger(__name__)


class CorpusLoadError(RuntimeError):
    """The corpus file could not be loaded at startup."""


@dataclass(frozen=True)
class CorpusContext:
    """Immutable corpus text plus where it came from."""

    text: str
    source: str

    def __len__(self) -> int:
        return len(self.text)


def load_corpus(path: str | Path) -> CorpusContext:
    """
    Read the corpus file into an immutable CorpusContext.

    Raises:
        CorpusLoadError: The file does not exist or cannot be decoded.
    """
    corpus_path = Path(path)
    try:
        text = corpus_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CorpusLoadError(
            f"Cannot read corpus file '{corpus_path}': {e}"
        ) from e

    if not text.strip():
        logger.warning("Corpus file '%s' is empty", corpus_path)

    logger.info(
        "Loaded corpus from %s (%d characters)", corpus_path, len(text),
    )
    return CorpusContext(text=text, source=str(corpus_path))


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_corpus: CorpusContext | None = None


def init_corpus(path: str | Path | None = None) -> CorpusContext:
    """Load the corpus once; later calls return the already-loaded instance."""
    global _corpus
    if _corpus is None:
        _corpus = load_corpus(path or settings.corpus_path)
    return _corpus


def get_corpus() -> CorpusContext:
    """
    Return the corpus loaded at startup.

    Used as a FastAPI dependency by /research and /chat.
    """
    if _corpus is None:
        raise CorpusLoadError("Corpus has not been loaded")
    return _corpus

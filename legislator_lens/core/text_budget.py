"""
Legislator Lens - text budgeting
Keeps bill text within the context window of small models.
"""
import logging
from typing import Optional

import tiktoken

logger = logging.getLogger(__name__)

OMISSION_MARKER = "\n\n[... middle sections omitted ...]\n\n"

# rough characters-per-token ratio used when no tokenizer is available
CHARS_PER_TOKEN = 4

_encoding = None
_encoding_loaded = False


def get_encoding():
    """Return the cl100k_base encoding, or None if it cannot be loaded."""
    global _encoding, _encoding_loaded
    if not _encoding_loaded:
        _encoding_loaded = True
        try:
            _encoding = tiktoken.get_encoding("cl100k_base")
        except Exception:
            logger.warning("LegislatorLens[TextBudget]: tiktoken init failed, falling back to character budgets.")
            _encoding = None
    return _encoding


def truncate_head(text: str, max_tokens: int, encoding=None) -> str:
    """Keep the beginning of `text`, at most `max_tokens` tokens."""
    if encoding is not None:
        tokens = encoding.encode(text)
        if len(tokens) <= max_tokens:
            return text
        return encoding.decode(tokens[:max_tokens])
    return text[:max_tokens * CHARS_PER_TOKEN]


def sample_head_tail(text: str, max_tokens: int, encoding=None) -> str:
    """
    Sample a long text from both ends.

    Texts longer than twice `max_tokens` are reduced to their first and last
    `max_tokens` tokens joined by an omission marker; shorter texts are
    returned unchanged.
    """
    if encoding is not None:
        tokens = encoding.encode(text)
        if len(tokens) <= max_tokens * 2:
            return text
        head = encoding.decode(tokens[:max_tokens])
        tail = encoding.decode(tokens[-max_tokens:])
        return head + OMISSION_MARKER + tail

    size = max_tokens * CHARS_PER_TOKEN
    if len(text) <= size * 2:
        return text
    return text[:size] + OMISSION_MARKER + text[-size:]


def resolve_encoding(use_tokenizer: Optional[bool] = True):
    """Encoding to budget with; None means character budgets."""
    return get_encoding() if use_tokenizer else None

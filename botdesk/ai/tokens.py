"""
Token counting with tiktoken

Counts are used for usage accounting only. Unknown model names fall back
to cl100k_base (gpt-4, gpt-3.5-turbo, text-embedding-3-*).
"""

from functools import lru_cache
import logging

import tiktoken

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "cl100k_base"


@lru_cache(maxsize=32)
def get_encoding(model_name: str):
    try:
        return tiktoken.encoding_for_model(model_name)
    except KeyError:
        logger.debug(f"No tiktoken encoding for {model_name}, using {DEFAULT_ENCODING}")
        return tiktoken.get_encoding(DEFAULT_ENCODING)


def count_tokens(text: str, model_name: str = "gpt-4") -> int:
    """
    Count tokens in text using tiktoken

    Args:
        text: Text to count tokens for
        model_name: Model name for encoding selection

    Returns:
        Token count (0 for empty text)
    """
    if not text:
        return 0
    return len(get_encoding(model_name).encode(text))

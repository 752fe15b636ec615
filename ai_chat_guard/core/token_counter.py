"""
Token estimation for response text.

Approximates token counts from character length. This is not a tokenizer.
"""

import math

# ~4 characters per token
CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> int:
    """Estimate the number of tokens in a piece of text.

    Args:
        text: Response text

    Returns:
        ceil(len(text) / 4), or 0 for empty text
    """
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)

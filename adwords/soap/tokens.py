"""Random identifiers for WS-Security token ids.

The generator is seeded from the wall clock at nanosecond resolution. It is
not cryptographically secure; ids only correlate elements of one envelope.
"""

import random
import time

from adwords.core.constants import TOKEN_ALPHABET, TOKEN_ID_LENGTH


def random_token(length: int = TOKEN_ID_LENGTH) -> str:
    """Return ``length`` characters drawn from [a-zA-Z0-9].

    Args:
        length: Number of characters

    Raises:
        ValueError: If length is negative
    """
    if length < 0:
        raise ValueError(f"Token length must be non-negative, got {length}")
    rng = random.Random(time.time_ns())
    return "".join(rng.choice(TOKEN_ALPHABET) for _ in range(length))

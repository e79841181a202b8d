"""
Subtree skipping over a flat token table

Tokens are stored in document order and their start offsets strictly
increase, so everything below token i is the contiguous run of following
tokens that start before tokens[i].end. Skipping a subtree means finding the
first token past that run.

Instead of scanning the run one token at a time, skip_subtree guesses the
answer from the byte length of the span and an average token density, then
corrects the guess by scanning forward or backward. The result is always
identical to linear_skip; only the number of tokens inspected changes.
"""

from __future__ import annotations
from typing import Iterator, Sequence, Tuple

from .tokenizer import Token

# Average reply bytes per token in workspace/output replies. Keys, short
# strings and booleans dominate, e.g. `"visible": true,` is two tokens.
AVERAGE_TOKEN_BYTES = 8


def linear_skip(tokens: Sequence[Token], index: int) -> int:
    """Return the first token after index that starts at or after its end."""
    end = tokens[index].end
    following = index + 1
    while following < len(tokens) and tokens[following].start < end:
        following += 1
    return following


def estimate_skip(
    tokens: Sequence[Token], index: int, bytes_per_token: int = AVERAGE_TOKEN_BYTES
) -> Tuple[int, int]:
    """Skip the subtree at index with an estimated jump.

    Returns:
        (index of the next token outside the subtree, correction steps taken)
    """
    if bytes_per_token < 1:
        raise ValueError(f"bytes_per_token must be positive, got {bytes_per_token}")

    count = len(tokens)
    token = tokens[index]
    end = token.end

    guess = min(index + 1 + (end - token.start) // bytes_per_token, count)
    steps = 0

    if guess < count and tokens[guess].start < end:
        # Undershot: still inside the span
        while guess < count and tokens[guess].start < end:
            guess += 1
            steps += 1
    else:
        # Overshot (or exact): back up to just past the last token inside
        while guess > index + 1 and tokens[guess - 1].start >= end:
            guess -= 1
            steps += 1
    return guess, steps


def skip_subtree(
    tokens: Sequence[Token], index: int, bytes_per_token: int = AVERAGE_TOKEN_BYTES
) -> int:
    """Return the index of the first token following the subtree at index.

    Equivalent to linear_skip(tokens, index) for every index.
    """
    return estimate_skip(tokens, index, bytes_per_token)[0]


class TreeNavigator:
    """Subtree skipping bound to one token table.

    Keeps counters of skips and correction steps for tuning the token
    density, and publishes each skip on the bus when one is given.
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        bytes_per_token: int = AVERAGE_TOKEN_BYTES,
        bus=None,
    ):
        """Initialize the navigator.

        Args:
            tokens: Token table produced by the tokenizer
            bytes_per_token: Average token density used for the jump estimate
            bus: Event bus instance (Pypubsub), optional
        """
        if bytes_per_token < 1:
            raise ValueError(f"bytes_per_token must be positive, got {bytes_per_token}")
        self.tokens = tokens
        self.bytes_per_token = bytes_per_token
        self.bus = bus

        self.jumps = 0
        self.corrections = 0

    def __len__(self) -> int:
        return len(self.tokens)

    def skip(self, index: int) -> int:
        """Return the index of the next token outside the subtree at index."""
        following, steps = estimate_skip(self.tokens, index, self.bytes_per_token)
        self.jumps += 1
        self.corrections += steps

        if self.bus:
            from . import topics

            self.bus.sendMessage(
                topics.SUBTREE_SKIPPED, index=index, target=following, corrections=steps
            )
        return following

    def elements(self, index: int) -> Iterator[int]:
        """Yield the indices of the direct children of an array."""
        end = self.tokens[index].end
        child = index + 1
        while child < len(self.tokens) and self.tokens[child].start < end:
            yield child
            child = self.skip(child)

    def members(self, index: int) -> Iterator[Tuple[int, int]]:
        """Yield (key index, value index) pairs of an object's members."""
        end = self.tokens[index].end
        key = index + 1
        while key < len(self.tokens) and self.tokens[key].start < end:
            yield key, key + 1
            key = self.skip(key + 1)

"""Negative sampling implementation for word2vec.

This module implements negative sampling as described in the word2vec papers:
- "Distributed Representations of Words and Phrases and their Compositionality" (Mikolov et al., 2013)
- "Efficient Estimation of Word Representations in Vector Space" (Mikolov et al., 2013)

Negatives are drawn in O(1) from a precomputed unigram table whose slots
are distributed proportionally to ``count ** 0.75``.
"""

from typing import Sequence

import numpy as np

from classic_word2vec.config import UNIGRAM_TABLE_SIZE


class UnigramTable:
    """Fixed-size lookup table for sampling from the smoothed unigram distribution.

    Implements the unigram distribution raised to the 3/4 power as described
    in the original word2vec paper. This gives less frequent words a higher
    probability of being selected as negative samples.
    """

    def __init__(
        self,
        counts: Sequence[int],
        table_size: int = UNIGRAM_TABLE_SIZE,
        power: float = 0.75,
    ):
        """Build the table.

        Args:
            counts: Word counts in vocabulary order
            table_size: Number of slots
            power: Power to raise the unigram distribution to (default 0.75)
        """
        self.vocab_size = len(counts)
        self.table_size = table_size
        self.power = power
        self.table = self._build(np.asarray(counts, dtype=np.float64))

    def _build(self, counts: np.ndarray) -> np.ndarray:
        """Walk the cumulative distribution across all slots.

        Slot ``a`` holds the first index whose cumulative probability reaches
        ``a / table_size``; the last index absorbs any rounding remainder.
        """
        powered = counts**self.power
        total = powered.sum()
        if total <= 0:
            powered = np.ones_like(powered)
            total = powered.sum()
        cumulative = np.cumsum(powered / total)

        ends = np.floor(cumulative * self.table_size).astype(np.int64) + 1
        ends = np.minimum(ends, self.table_size)
        ends[-1] = self.table_size
        starts = np.concatenate(([0], ends[:-1]))
        lengths = np.maximum(ends - starts, 0)
        return np.repeat(np.arange(self.vocab_size, dtype=np.int32), lengths)

    def __len__(self) -> int:
        return self.table_size

    def sample(self, next_random: int) -> int:
        """Map one pseudo-random draw to a vocabulary index.

        A draw that lands on the boundary token (index 0) is replaced by a
        uniformly chosen non-zero index derived from the same draw.

        Args:
            next_random: Current state of the caller's linear congruential generator

        Returns:
            Sampled vocabulary index
        """
        target = int(self.table[(next_random >> 16) % self.table_size])
        if target == 0 and self.vocab_size > 1:
            target = next_random % (self.vocab_size - 1) + 1
        return target

    def probabilities(self) -> np.ndarray:
        """Empirical share of table slots per vocabulary index."""
        return np.bincount(self.table, minlength=self.vocab_size) / self.table_size


def negative_sampling_update(
    hidden: np.ndarray,
    hidden_error: np.ndarray,
    syn1neg: np.ndarray,
    word: int,
    negative: int,
    alpha: float,
    sigmoid,
    table: UnigramTable,
    rng,
) -> None:
    """Contrast the true target against ``negative`` sampled words.

    The target gets label 1 and each sample label 0. A sample equal to the
    target is dropped, not redrawn. Terms whose activation falls outside the
    sigmoid table are skipped, as in ``hierarchical_softmax_update``, instead
    of taking the saturated gradient ``(label - 0|1) * alpha`` that the C
    word2vec tool applies there.

    Args:
        hidden: Input vector (averaged context for CBOW, context row for skip-gram)
        hidden_error: Error accumulator for ``hidden``
        syn1neg: Negative-sampling output weights
        word: True target index
        negative: Number of negatives
        alpha: Learning rate
        sigmoid: ``SigmoidTable`` lookup
        table: Unigram table to draw negatives from
        rng: Worker's ``LinearCongruentialGenerator``
    """
    for d in range(negative + 1):
        if d == 0:
            target = word
            label = 1
        else:
            target = table.sample(rng.next())
            if target == word:
                continue
            label = 0

        row = syn1neg[target]
        f = float(np.dot(hidden, row))
        if not sigmoid.in_range(f):
            continue
        g = (label - sigmoid(f)) * alpha
        hidden_error += g * row
        row += g * hidden

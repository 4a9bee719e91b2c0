"""Word2vec parameter storage and per-position SGD steps."""

from typing import Iterator, List, Optional, Sequence

import numpy as np
import torch

from classic_word2vec.config import EXP_TABLE_SIZE, MAX_EXP
from classic_word2vec.hierarchical_softmax import hierarchical_softmax_update
from classic_word2vec.negative_sampling import UnigramTable, negative_sampling_update
from classic_word2vec.vocabulary import Vocabulary


class SigmoidTable:
    """Precomputed logistic function over ``(-max_exp, max_exp)``.

    Built once and shared read-only by every worker.
    """

    def __init__(self, size: int = EXP_TABLE_SIZE, max_exp: int = MAX_EXP):
        self.size = size
        self.max_exp = max_exp
        # Truncated: 1000 // 6 // 2 == 83
        self.scale = size // max_exp // 2
        exp = np.exp((np.arange(size + 1) / size * 2 - 1) * max_exp)
        self.table = (exp / (exp + 1)).astype(np.float32)

    def in_range(self, x: float) -> bool:
        return -self.max_exp < x < self.max_exp

    def __call__(self, x: float) -> float:
        return float(self.table[int((x + self.max_exp) * self.scale)])


class ParameterMatrices:
    """Input embeddings and the two optional output-weight matrices.

    Storage is allocated as torch tensors; ``syn0``, ``syn1`` and ``syn1neg``
    are numpy views over the same memory and are what the workers update.

    Concurrency contract: every worker reads and writes these rows without
    any locking. Interleaved or lost updates to the same row from different
    threads are expected (Hogwild-style asynchronous SGD) and are tolerated
    by the optimization, so no synchronization is added here.
    """

    def __init__(
        self,
        vocab_size: int,
        embedding_dim: int,
        hs: bool = False,
        negative: int = 0,
        seed: int = 1,
    ):
        """Allocate and initialize the matrices.

        Args:
            vocab_size: Number of rows
            embedding_dim: Number of columns
            hs: Allocate hierarchical-softmax weights
            negative: Allocate negative-sampling weights when > 0
            seed: Seed for the input-embedding initialization
        """
        self.vocab_size = vocab_size
        self.embedding_dim = embedding_dim

        generator = torch.Generator().manual_seed(seed)
        with torch.no_grad():
            # Uniform in [-0.5 / dim, 0.5 / dim)
            self.in_embeddings = (
                torch.rand(vocab_size, embedding_dim, generator=generator) - 0.5
            ) / embedding_dim
            # Output weights start at zero
            self.hs_weights = torch.zeros(vocab_size, embedding_dim) if hs else None
            self.ns_weights = (
                torch.zeros(vocab_size, embedding_dim) if negative > 0 else None
            )

        self.syn0 = self.in_embeddings.numpy()
        self.syn1 = self.hs_weights.numpy() if self.hs_weights is not None else None
        self.syn1neg = self.ns_weights.numpy() if self.ns_weights is not None else None


class Word2VecBase:
    """Shared state of the CBOW and skip-gram update rules.

    One instance belongs to one worker: ``hidden`` and ``hidden_error`` are
    private scratch buffers, everything else is shared.
    """

    def __init__(
        self,
        params: ParameterMatrices,
        vocab: Vocabulary,
        window: int,
        negative: int,
        sigmoid: SigmoidTable,
        table: Optional[UnigramTable] = None,
    ):
        """Initialize the update rule.

        Args:
            params: Shared parameter matrices
            vocab: Finalized vocabulary with Huffman codes assigned
            window: Maximum context distance
            negative: Negatives per target (0 disables negative sampling)
            sigmoid: Shared sigmoid lookup
            table: Unigram table, required when ``negative > 0``
        """
        if negative > 0 and (table is None or params.syn1neg is None):
            raise ValueError("Negative sampling needs a unigram table and syn1neg")
        self.params = params
        self.vocab = vocab
        self.window = window
        self.negative = negative
        self.sigmoid = sigmoid
        self.table = table
        self.hs = params.syn1 is not None

        dim = params.embedding_dim
        self.hidden = np.zeros(dim, dtype=np.float32)
        self.hidden_error = np.zeros(dim, dtype=np.float32)

    def context(self, sentence: Sequence[int], position: int, reduced: int) -> Iterator[int]:
        """Context words of ``position`` with the window shrunk by ``reduced``."""
        for a in range(reduced, 2 * self.window + 1 - reduced):
            if a == self.window:
                continue
            c = position - self.window + a
            if 0 <= c < len(sentence):
                yield sentence[c]

    def _output_layers(self, hidden: np.ndarray, word: int, alpha: float, rng) -> None:
        if self.hs:
            entry = self.vocab[word]
            hierarchical_softmax_update(
                hidden,
                self.hidden_error,
                self.params.syn1,
                entry.code,
                entry.point,
                alpha,
                self.sigmoid,
            )
        if self.negative > 0:
            negative_sampling_update(
                hidden,
                self.hidden_error,
                self.params.syn1neg,
                word,
                self.negative,
                alpha,
                self.sigmoid,
                self.table,
                rng,
            )

    def train_position(
        self, sentence: Sequence[int], position: int, reduced: int, alpha: float, rng
    ) -> None:
        raise NotImplementedError


class CBOWModel(Word2VecBase):
    """Continuous bag-of-words: predict the center word from its averaged context."""

    def train_position(
        self, sentence: Sequence[int], position: int, reduced: int, alpha: float, rng
    ) -> None:
        """Apply one SGD step for the word at ``position``.

        The summed output error is added in full to every context row.

        Args:
            sentence: Vocabulary indices of the current sentence
            position: Center word position
            reduced: Random window shrink in ``[0, window)``
            alpha: Learning rate
            rng: Worker's random generator
        """
        context: List[int] = list(self.context(sentence, position, reduced))
        if not context:
            return

        syn0 = self.params.syn0
        np.sum(syn0[context], axis=0, out=self.hidden)
        self.hidden /= len(context)
        self.hidden_error.fill(0.0)

        self._output_layers(self.hidden, sentence[position], alpha, rng)

        for c in context:
            syn0[c] += self.hidden_error


class SkipGramModel(Word2VecBase):
    """Skip-gram: each context word's embedding predicts the center word."""

    def train_position(
        self, sentence: Sequence[int], position: int, reduced: int, alpha: float, rng
    ) -> None:
        """Apply one SGD step per context word of ``position``.

        Args:
            sentence: Vocabulary indices of the current sentence
            position: Center word position
            reduced: Random window shrink in ``[0, window)``
            alpha: Learning rate
            rng: Worker's random generator
        """
        syn0 = self.params.syn0
        word = sentence[position]
        for c in self.context(sentence, position, reduced):
            self.hidden_error.fill(0.0)
            # View into syn0; only written below, after both output layers ran
            row = syn0[c]
            self._output_layers(row, word, alpha, rng)
            row += self.hidden_error


__all__ = [
    "SigmoidTable",
    "ParameterMatrices",
    "Word2VecBase",
    "CBOWModel",
    "SkipGramModel",
]

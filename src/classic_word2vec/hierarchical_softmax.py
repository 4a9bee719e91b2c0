"""Hierarchical softmax over a Huffman-coded vocabulary."""

from typing import List, Sequence

import numpy as np

from classic_word2vec.config import MAX_CODE_LENGTH
from classic_word2vec.vocabulary import Vocabulary

# Count given to not-yet-created internal nodes
_UNSET_COUNT = 10**15


class HuffmanTree:
    """Huffman tree for building binary hierarchy of vocabulary words.

    This implementation follows the original word2vec approach where:
    - Frequent words get shorter binary codes (closer to root)
    - Less frequent words get longer binary codes (farther from root)
    - Each internal node has an associated parameter vector

    Counts must already be sorted in descending order, which lets the
    construction walk two monotonic cursors instead of using a heap: one
    moving left over the leaves, one moving right over the internal nodes in
    creation order. Node ``i < V`` is a leaf; node ``V + k`` is the ``k``-th
    internal node and the root is ``2V - 2``. Paths store internal nodes as
    offsets ``k`` so they index rows of the output weight matrix directly.
    """

    def __init__(self, counts: Sequence[int], max_code_length: int = MAX_CODE_LENGTH):
        """Build the tree from frequency-sorted counts.

        Args:
            counts: Word counts, descending
            max_code_length: Longest code allowed

        Raises:
            ValueError: If a code would exceed ``max_code_length``
        """
        self.vocab_size = len(counts)
        self.max_code_length = max_code_length
        self.parent = np.zeros(max(2 * self.vocab_size - 1, 0), dtype=np.int64)
        self.binary = np.zeros(max(2 * self.vocab_size - 1, 0), dtype=np.int8)
        self._merge(counts)
        self.codes, self.points = self._assign_codes()

    @property
    def num_inner_nodes(self) -> int:
        return max(self.vocab_size - 1, 0)

    @property
    def root(self) -> int:
        return 2 * self.vocab_size - 2

    def _merge(self, counts: Sequence[int]) -> None:
        size = self.vocab_size
        count = np.full(2 * size + 1, _UNSET_COUNT, dtype=np.int64)
        count[:size] = counts

        pos1 = size - 1
        pos2 = size
        for a in range(size - 1):
            # Two smallest available nodes; ties prefer the internal node
            picked = []
            for _ in range(2):
                if pos1 >= 0 and count[pos1] < count[pos2]:
                    picked.append(pos1)
                    pos1 -= 1
                else:
                    picked.append(pos2)
                    pos2 += 1
            min1, min2 = picked
            count[size + a] = count[min1] + count[min2]
            self.parent[min1] = size + a
            self.parent[min2] = size + a
            self.binary[min2] = 1

    def _assign_codes(self):
        size = self.vocab_size
        codes: List[List[int]] = []
        points: List[List[int]] = []
        if size < 2:
            return [[] for _ in range(size)], [[] for _ in range(size)]

        for leaf in range(size):
            code = []
            path = []
            node = leaf
            while node != self.root:
                code.append(int(self.binary[node]))
                node = int(self.parent[node])
                path.append(node - size)
                if len(code) > self.max_code_length:
                    raise ValueError(
                        f"Huffman code for word {leaf} exceeds {self.max_code_length} bits"
                    )
            code.reverse()
            path.reverse()
            codes.append(code)
            points.append(path)
        return codes, points

    def assign_to(self, vocab: Vocabulary) -> None:
        """Copy codes and paths onto the vocabulary entries."""
        for entry, code, point in zip(vocab.words, self.codes, self.points):
            entry.code = code
            entry.point = point

    def decode(self, code: Sequence[int]) -> int:
        """Follow ``code`` from the root and return the leaf reached.

        Args:
            code: Root-to-leaf bit sequence

        Returns:
            Leaf (vocabulary) index

        Raises:
            ValueError: If the code does not end on a leaf
        """
        children = self.children()
        node = self.root
        for bit in code:
            if node < self.vocab_size:
                raise ValueError(f"Code {list(code)} walks past a leaf")
            node = children[node - self.vocab_size][bit]
        if node >= self.vocab_size:
            raise ValueError(f"Code {list(code)} ends on an internal node")
        return node

    def children(self) -> List[List[int]]:
        """Child node ids per internal node offset, indexed by branch bit."""
        kids = [[-1, -1] for _ in range(self.num_inner_nodes)]
        for node in range(self.root):
            kids[int(self.parent[node]) - self.vocab_size][int(self.binary[node])] = node
        return kids

    @classmethod
    def from_vocabulary(
        cls, vocab: Vocabulary, max_code_length: int = MAX_CODE_LENGTH
    ) -> "HuffmanTree":
        """Build the tree for a finalized vocabulary and store codes on it."""
        tree = cls([entry.count for entry in vocab.words], max_code_length)
        tree.assign_to(vocab)
        return tree


def hierarchical_softmax_update(
    hidden: np.ndarray,
    hidden_error: np.ndarray,
    syn1: np.ndarray,
    code: Sequence[int],
    point: Sequence[int],
    alpha: float,
    sigmoid,
) -> None:
    """Run one logistic regression per edge of a word's Huffman path.

    Accumulates the error for ``hidden`` into ``hidden_error`` and updates
    the rows of ``syn1`` on the path in place. Edges whose activation falls
    outside the sigmoid table are skipped.

    Args:
        hidden: Input vector (averaged context for CBOW, context row for skip-gram)
        hidden_error: Error accumulator for ``hidden``
        syn1: Internal-node output weights
        code: Branch bits of the target word
        point: Internal-node offsets of the target word
        alpha: Learning rate
        sigmoid: ``SigmoidTable`` lookup
    """
    for bit, node in zip(code, point):
        row = syn1[node]
        f = float(np.dot(hidden, row))
        if not sigmoid.in_range(f):
            continue
        g = (1 - bit - sigmoid(f)) * alpha
        hidden_error += g * row
        row += g * hidden

"""Utility functions for word2vec."""

import os
import random
from typing import List, Sequence

import numpy as np
import torch

from classic_word2vec.utils.tensorboard_logger import TensorBoardLogger

_STATE_MASK = (1 << 64) - 1

# Number of k-means refinement passes used for word classes
KMEANS_ITERATIONS = 10


def set_seed(seed: int) -> None:
    """Set random seeds for reproducibility.

    Args:
        seed: Random seed value
    """
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)


class LinearCongruentialGenerator:
    """The 64-bit LCG used by word2vec for every per-worker random draw."""

    MULTIPLIER = 25214903917
    INCREMENT = 11

    def __init__(self, seed: int):
        self.state = seed & _STATE_MASK

    def next(self) -> int:
        """Advance and return the new 64-bit state."""
        self.state = (self.state * self.MULTIPLIER + self.INCREMENT) & _STATE_MASK
        return self.state

    def uniform(self) -> float:
        """Advance and return a value in ``[0, 1)`` from the low 16 bits."""
        return (self.next() & 0xFFFF) / 65536.0


def _ensure_parent_dir(path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def save_word_vectors(
    path: str, words: Sequence[str], embeddings: np.ndarray, binary: bool = False
) -> None:
    """Write embeddings in the word2vec vector format.

    A ``"<count> <dim>"`` header is followed by one entry per word: the token,
    a space, then the row as little-endian float32 bytes (binary) or as
    space-terminated decimals (text), and a newline.

    Args:
        path: Output file
        words: Tokens in row order
        embeddings: Matrix of shape (len(words), dim)
        binary: Write raw float32 instead of text
    """
    embeddings = np.asarray(embeddings, dtype=np.float32)
    num_words, dim = embeddings.shape
    _ensure_parent_dir(path)

    with open(path, "wb") as f:
        f.write(f"{num_words} {dim}\n".encode("utf-8"))
        for word, row in zip(words, embeddings):
            f.write(f"{word} ".encode("utf-8"))
            if binary:
                f.write(row.astype("<f4").tobytes())
            else:
                f.write("".join(f"{value:f} " for value in row).encode("utf-8"))
            f.write(b"\n")


def kmeans_word_classes(
    embeddings: np.ndarray, num_classes: int, iterations: int = KMEANS_ITERATIONS
) -> np.ndarray:
    """Cluster rows with spherical k-means.

    Rows start in class ``row % num_classes``. Each pass recomputes centroid
    means (every count seeded at one), renormalizes the centroids to unit
    length and reassigns each row to the centroid with the largest dot
    product.

    Args:
        embeddings: Matrix of shape (num_words, dim)
        num_classes: Number of clusters
        iterations: Number of passes

    Returns:
        Class id per row
    """
    embeddings = np.asarray(embeddings, dtype=np.float32)
    num_words, dim = embeddings.shape
    assignments = np.arange(num_words) % num_classes

    for _ in range(iterations):
        centroids = np.zeros((num_classes, dim), dtype=np.float32)
        np.add.at(centroids, assignments, embeddings)
        sizes = np.bincount(assignments, minlength=num_classes) + 1
        centroids /= sizes[:, None]

        norms = np.linalg.norm(centroids, axis=1, keepdims=True)
        centroids = np.divide(
            centroids, norms, out=np.zeros_like(centroids), where=norms > 0
        )
        assignments = np.argmax(embeddings @ centroids.T, axis=1)

    return assignments


def save_word_classes(path: str, words: Sequence[str], classes: Sequence[int]) -> None:
    """Write one ``"<token> <class id>"`` line per word."""
    _ensure_parent_dir(path)
    with open(path, "wb") as f:
        for word, class_id in zip(words, classes):
            f.write(f"{word} {int(class_id)}\n".encode("utf-8"))


def export_model(
    path: str,
    words: List[str],
    embeddings: np.ndarray,
    binary: bool = False,
    classes: int = 0,
) -> None:
    """Write trained input embeddings, or their k-means classes.

    Args:
        path: Output file
        words: Tokens in row order
        embeddings: Input-embedding matrix
        binary: Vector encoding when writing raw vectors
        classes: Cluster count; 0 writes vectors
    """
    if classes > 0:
        save_word_classes(path, words, kmeans_word_classes(embeddings, classes))
    else:
        save_word_vectors(path, words, embeddings, binary)


__all__ = [
    "set_seed",
    "LinearCongruentialGenerator",
    "save_word_vectors",
    "kmeans_word_classes",
    "save_word_classes",
    "export_model",
    "TensorBoardLogger",
]

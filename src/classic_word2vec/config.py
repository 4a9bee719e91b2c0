"""Centralized configuration management for word2vec training."""

from dataclasses import dataclass
from typing import Literal, Optional


# Fixed capacities
MAX_EXP = 6
EXP_TABLE_SIZE = 1000
MAX_CODE_LENGTH = 40
MAX_SENTENCE_LENGTH = 1000
VOCAB_HASH_SIZE = 30_000_000
UNIGRAM_TABLE_SIZE = 100_000_000

# Reserved sentence-boundary token, always at vocabulary index 0
BOUNDARY_TOKEN = "</s>"

# Defaults
DEFAULT_EMBEDDING_DIM = 100
DEFAULT_WINDOW_SIZE = 5
DEFAULT_SAMPLE = 1e-3
DEFAULT_NEGATIVE = 5
DEFAULT_THREADS = 12
DEFAULT_ITERATIONS = 5
DEFAULT_MIN_COUNT = 5
DEFAULT_DEBUG_MODE = 2
DEFAULT_CBOW_ALPHA = 0.05
DEFAULT_SKIPGRAM_ALPHA = 0.025
DEFAULT_SEED = 1
DEFAULT_TOP_N = 40

# Type aliases
ModelType = Literal["cbow", "skipgram"]


@dataclass
class TrainConfig:
    """Configuration for a training run.

    Mirrors the option set of the classic ``word2vec`` tool. ``alpha`` left as
    ``None`` resolves to 0.05 for CBOW and 0.025 for skip-gram.
    """

    train_file: str = ""
    output_file: str = ""
    save_vocab_file: str = ""
    read_vocab_file: str = ""
    size: int = DEFAULT_EMBEDDING_DIM
    debug_mode: int = DEFAULT_DEBUG_MODE
    binary: bool = False
    cbow: bool = True
    alpha: Optional[float] = None
    sample: float = DEFAULT_SAMPLE
    hs: bool = False
    negative: int = DEFAULT_NEGATIVE
    threads: int = DEFAULT_THREADS
    iterations: int = DEFAULT_ITERATIONS
    min_count: int = DEFAULT_MIN_COUNT
    classes: int = 0
    window: int = DEFAULT_WINDOW_SIZE
    seed: int = DEFAULT_SEED

    # Capacity overrides (small corpora and tests)
    vocab_hash_size: int = VOCAB_HASH_SIZE
    unigram_table_size: int = UNIGRAM_TABLE_SIZE

    # TensorBoard logging
    tensorboard: bool = False
    tensorboard_dir: str = "runs/tensorboard"
    log_system_stats: bool = False

    @property
    def model_type(self) -> ModelType:
        return "cbow" if self.cbow else "skipgram"

    @property
    def starting_alpha(self) -> float:
        if self.alpha is not None:
            return self.alpha
        return DEFAULT_CBOW_ALPHA if self.cbow else DEFAULT_SKIPGRAM_ALPHA

    def validate(self) -> None:
        """Check option ranges.

        Raises:
            ValueError: If an option is out of range or no output layer is enabled
        """
        if self.size <= 0:
            raise ValueError(f"size must be positive, got {self.size}")
        if self.window <= 0:
            raise ValueError(f"window must be positive, got {self.window}")
        if self.threads <= 0:
            raise ValueError(f"threads must be positive, got {self.threads}")
        if self.iterations <= 0:
            raise ValueError(f"iterations must be positive, got {self.iterations}")
        if self.negative < 0:
            raise ValueError(f"negative must be >= 0, got {self.negative}")
        if self.classes < 0:
            raise ValueError(f"classes must be >= 0, got {self.classes}")
        if self.sample < 0:
            raise ValueError(f"sample must be >= 0, got {self.sample}")
        if not self.hs and self.negative == 0:
            raise ValueError(
                "At least one output layer is required: enable hs or set negative > 0"
            )
        if self.unigram_table_size <= 0 or self.vocab_hash_size <= 0:
            raise ValueError("Table sizes must be positive")

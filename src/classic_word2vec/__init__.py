"""Classic word2vec: Hogwild CBOW and skip-gram training with a query engine."""

__version__ = "0.1.0"

# Configuration
from classic_word2vec.config import TrainConfig

# Vocabulary
from classic_word2vec.vocabulary import Vocabulary, VocabWord

# Hierarchical Softmax
from classic_word2vec.hierarchical_softmax import HuffmanTree

# Negative Sampling
from classic_word2vec.negative_sampling import UnigramTable

# Core models
from classic_word2vec.models import (
    CBOWModel,
    ParameterMatrices,
    SigmoidTable,
    SkipGramModel,
    Word2VecBase,
)

# Training
from classic_word2vec.training import Trainer, TrainingError

# Querying
from classic_word2vec.store import EmbeddingStore
from classic_word2vec.query import NeedThreeWordsError, OutOfVocabularyError, QueryEngine

# Utilities
from classic_word2vec.utils import (
    LinearCongruentialGenerator,
    TensorBoardLogger,
    export_model,
    kmeans_word_classes,
    save_word_vectors,
    set_seed,
)

__all__ = [
    # Configuration
    "TrainConfig",
    # Vocabulary
    "Vocabulary",
    "VocabWord",
    # Hierarchical Softmax
    "HuffmanTree",
    # Negative Sampling
    "UnigramTable",
    # Models
    "CBOWModel",
    "SkipGramModel",
    "Word2VecBase",
    "ParameterMatrices",
    "SigmoidTable",
    # Training
    "Trainer",
    "TrainingError",
    # Querying
    "EmbeddingStore",
    "QueryEngine",
    "OutOfVocabularyError",
    "NeedThreeWordsError",
    # Utilities
    "LinearCongruentialGenerator",
    "TensorBoardLogger",
    "export_model",
    "kmeans_word_classes",
    "save_word_vectors",
    "set_seed",
]

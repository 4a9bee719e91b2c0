"""CLI modules for word2vec."""

from classic_word2vec.cli.train import main as train_main
from classic_word2vec.cli.query import main as query_main

__all__ = ["train_main", "query_main"]

"""TensorBoard logging utilities for word2vec training."""

import os
import time
from typing import Any, Dict, Optional

import psutil
import torch
from torch.utils.tensorboard import SummaryWriter


class TensorBoardLogger:
    """TensorBoard logger for the parallel trainer."""

    def __init__(
        self,
        log_dir: str,
        log_system_stats: bool = False,
        experiment_name: Optional[str] = None,
    ):
        """Initialize TensorBoard logger.

        Args:
            log_dir: Directory to save TensorBoard logs
            log_system_stats: Whether to log system statistics
            experiment_name: Optional experiment name for subdirectory
        """
        self.enable_system_logging = log_system_stats

        # Create experiment-specific directory
        if experiment_name:
            log_dir = os.path.join(log_dir, experiment_name)
        else:
            # Use timestamp for unique run identification
            timestamp = time.strftime("%Y%m%d_%H%M%S")
            log_dir = os.path.join(log_dir, f"run_{timestamp}")

        self.writer = SummaryWriter(log_dir)
        self.log_dir = log_dir

        if self.enable_system_logging:
            self.process = psutil.Process()

        print(f"TensorBoard logging to: {log_dir}")
        print(f"  View with: tensorboard --logdir {log_dir}")

    def log_hyperparameters(self, hparams: Dict[str, Any], metrics: Dict[str, float]):
        """Log hyperparameters and metrics.

        Args:
            hparams: Dictionary of hyperparameters
            metrics: Dictionary of metrics
        """
        # Convert non-serializable values to strings
        serializable_hparams = {}
        for key, value in hparams.items():
            if isinstance(value, (int, float, str, bool)):
                serializable_hparams[key] = value
            else:
                serializable_hparams[key] = str(value)

        self.writer.add_hparams(serializable_hparams, metrics)

    def log_training_metrics(
        self,
        step: int,
        learning_rate: float,
        progress: float,
        words_per_sec: float,
    ):
        """Log the trainer's shared progress state.

        Args:
            step: Words processed so far across all workers
            learning_rate: Current learning rate
            progress: Fraction of the total word budget processed
            words_per_sec: Throughput since training started
        """
        self.writer.add_scalar("train/learning_rate", learning_rate, step)
        self.writer.add_scalar("train/progress", progress, step)
        self.writer.add_scalar("train/words_per_sec", words_per_sec, step)

    def log_system_stats(self, step: int):
        """Log CPU and memory usage of the training process.

        Args:
            step: Words processed so far
        """
        if not self.enable_system_logging:
            return

        self.writer.add_scalar("system/cpu_percent", psutil.cpu_percent(interval=None), step)
        memory = psutil.virtual_memory()
        self.writer.add_scalar("system/memory_percent", memory.percent, step)
        self.writer.add_scalar(
            "system/process_memory_mb", self.process.memory_info().rss / 1e6, step
        )
        self.writer.add_scalar("system/num_threads", self.process.num_threads(), step)

    def log_embedding_analysis(
        self, embeddings: torch.Tensor, step: int, prefix: str = "embeddings"
    ):
        """Log embedding norm statistics.

        Args:
            embeddings: Embedding tensor (vocab_size, embedding_dim)
            step: Global training step
            prefix: Prefix for metric names
        """
        with torch.no_grad():
            norms = embeddings.norm(dim=1)
            self.writer.add_scalar(f"{prefix}/mean", embeddings.mean(), step)
            self.writer.add_scalar(f"{prefix}/std", embeddings.std(), step)
            self.writer.add_scalar(f"{prefix}/norm_mean", norms.mean(), step)
            self.writer.add_scalar(f"{prefix}/norm_std", norms.std(), step)
            self.writer.add_histogram(f"{prefix}/norms", norms, step)

    def close(self):
        """Close the TensorBoard writer."""
        self.writer.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

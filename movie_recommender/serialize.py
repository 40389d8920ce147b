"""
Model Serialization Module

Handles saving and loading the fitted pipeline to/from disk.
"""

import logging
import os
import pickle
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def save_model(model: Any, path) -> None:
    """
    Save the fitted pipeline to a pickle file.

    The model carries its own input schema, so the file alone is enough to
    score new pairs later. The file is written to a temporary name and
    moved into place, so concurrent requests never leave a partial file.

    Args:
        model: Trained model object (MatrixFactorizationRecommender)
        path: File path to save model

    Example:
        >>> save_model(trained_model, "Data/MovieRecommenderModel.pkl")
    """
    logger.info("=============== Saving the model to a file ===============")

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp = tempfile.mkstemp(dir=output_path.parent, prefix=".tmp.")
    try:
        with os.fdopen(fd, "wb") as f:
            pickle.dump(model, f)
        os.replace(tmp, output_path)
    except BaseException:
        os.unlink(tmp)
        raise

    logger.info(f"Model saved to: {output_path}")


def load_model(path) -> Any:
    """
    Load a fitted pipeline from a pickle file.

    Args:
        path: File path to saved model

    Returns:
        Loaded model object

    Raises:
        FileNotFoundError: If model file doesn't exist
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Model file not found: {path}")

    with open(path, 'rb') as f:
        model = pickle.load(f)

    logger.info(f"Model loaded from: {path}")
    return model


def get_model_size(path) -> float:
    """
    Get size of saved model file in megabytes.

    Args:
        path: Path to model file

    Returns:
        Model size in MB
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Model file not found: {path}")

    return os.path.getsize(path) / (1024 ** 2)

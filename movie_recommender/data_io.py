"""
Data I/O Module

Handles loading of the ratings datasets and parsing of request input:
- Train/test CSV loading into DataFrames
- Column normalization (userId/movieId/rating -> user_id/movie_id/rating)
- Parsing of the "userId:movieId" query string value
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Optional, Tuple

import pandas as pd

from . import config

logger = logging.getLogger(__name__)

_ASCII_DIGITS = re.compile(r"[0-9]+")


@dataclass
class MovieRating:
    """A single user/movie rating record. `rating` is the label and may be unknown."""
    user_id: int
    movie_id: int
    rating: Optional[float] = None


@dataclass
class MovieRatingPrediction:
    """Predicted score for a user/movie pair."""
    user_id: int
    movie_id: int
    score: float


def load_ratings_csv(path, csv_config: Optional[dict] = None) -> pd.DataFrame:
    """
    Load a ratings CSV file into a DataFrame.

    Args:
        path: Path to a comma-separated file with a header row
        csv_config: CSV settings (uses config.CSV_CONFIG if None)

    Returns:
        DataFrame with columns user_id (int), movie_id (int), rating (float),
        plus any extra columns present in the file (e.g. timestamp)

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If a required column is missing

    Example:
        >>> df = load_ratings_csv("Data/recommendation-ratings-train.csv")
        >>> print(df.columns.tolist())
        ['user_id', 'movie_id', 'rating', 'timestamp']
    """
    if csv_config is None:
        csv_config = config.CSV_CONFIG

    if not os.path.exists(path):
        raise FileNotFoundError(f"Ratings file not found: {path}")

    df = pd.read_csv(
        path,
        sep=csv_config["separator"],
        header=0 if csv_config["has_header"] else None,
    )
    df.columns = [str(col).strip() for col in df.columns]
    df = df.rename(columns=csv_config["column_aliases"])

    duplicated = sorted(set(df.columns[df.columns.duplicated()]))
    if duplicated:
        raise ValueError(f"Ratings file {path} maps several columns onto {duplicated}")

    missing = [col for col in csv_config["required_columns"] if col not in df.columns]
    if missing:
        raise ValueError(f"Ratings file {path} is missing required columns: {missing}")

    for col in csv_config["required_columns"]:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    n_rows = len(df)
    df = df.dropna(subset=csv_config["required_columns"])
    # Fractional ids would silently collapse onto another id when cast
    df = df[(df["user_id"] % 1 == 0) & (df["movie_id"] % 1 == 0)].reset_index(drop=True)
    n_dropped = n_rows - len(df)
    if n_dropped:
        logger.warning(f"Dropped {n_dropped} malformed rows from {path}")

    df["user_id"] = df["user_id"].astype("int64")
    df["movie_id"] = df["movie_id"].astype("int64")
    df["rating"] = df["rating"].astype("float32")

    return df


def load_data(train_path=None, test_path=None) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Load the training and test datasets.

    Args:
        train_path: Training CSV path (uses config.TRAIN_DATA_PATH if None)
        test_path: Test CSV path (uses config.TEST_DATA_PATH if None)

    Returns:
        Tuple of (train_df, test_df)
    """
    if train_path is None:
        train_path = config.TRAIN_DATA_PATH
    if test_path is None:
        test_path = config.TEST_DATA_PATH

    train_df = load_ratings_csv(train_path)
    test_df = load_ratings_csv(test_path)

    logger.info(f"Loaded {len(train_df)} training and {len(test_df)} test ratings")
    return train_df, test_df


def parse_movie_data(movie_data: Optional[str]) -> MovieRating:
    """
    Parse a "userId:movieId" string into a MovieRating.

    Args:
        movie_data: Raw query-string value, e.g. "6:10"

    Returns:
        MovieRating with no label

    Raises:
        ValueError: If the value is blank, not two parts, or not integers
    """
    if movie_data is None or not movie_data.strip():
        raise ValueError(f"Please pass {config.SERVING_CONFIG['query_parameter']} on the query string")

    parts = movie_data.strip().split(":")
    if len(parts) != 2:
        raise ValueError(f"movieData must look like '<userId>:<movieId>', got '{movie_data}'")

    user_part, movie_part = parts[0].strip(), parts[1].strip()
    if not (_ASCII_DIGITS.fullmatch(user_part) and _ASCII_DIGITS.fullmatch(movie_part)):
        raise ValueError(f"userId and movieId must be integers, got '{movie_data}'")
    user_id, movie_id = int(user_part), int(movie_part)

    if user_id <= 0 or movie_id <= 0:
        raise ValueError(f"userId and movieId must be positive integers, got '{movie_data}'")

    return MovieRating(user_id=user_id, movie_id=movie_id)

"""
Model Training Module

Handles model training orchestration: key encoding, bias estimation and
matrix factorization.
"""

import logging
from typing import Optional

import pandas as pd

from . import config as default_config
from .model import MatrixFactorizationRecommender
from .feature_engineering import (
    build_user_item_matrix,
    calculate_global_statistics,
    compute_residual_matrix
)

logger = logging.getLogger(__name__)


def build_and_train_model(train_df: pd.DataFrame,
                          config: Optional[dict] = None) -> MatrixFactorizationRecommender:
    """
    Train the matrix factorization pipeline.

    Steps:
    1. Average duplicate (user, movie) ratings
    2. Map user and movie ids to dense keys
    3. Calculate global statistics (mean, biases)
    4. Factorize the bias-adjusted rating matrix

    Args:
        train_df: Training DataFrame with user_id, movie_id, rating
        config: MF configuration (approximation_rank, n_iterations, random_state);
            uses config.MF_CONFIG if None

    Returns:
        Trained MatrixFactorizationRecommender

    Raises:
        ValueError: If train_df is empty or too small to factorize

    Example:
        >>> model = build_and_train_model(train_df, {"approximation_rank": 100})
        >>> print(model.n_users, model.n_items)
        610 9724
    """
    if config is None:
        config = default_config.MF_CONFIG

    if train_df.empty:
        raise ValueError("Training data is empty")

    approximation_rank = config.get('approximation_rank', 100)
    n_iterations = config.get('n_iterations', 20)
    random_state = config.get('random_state', 42)

    input_schema = {col: str(dtype) for col, dtype in train_df.dtypes.items()}

    ratings_df = (train_df
                  .groupby(['user_id', 'movie_id'], sort=False, as_index=False)['rating']
                  .mean())

    logger.info("=============== Training the model ===============")
    ratings_matrix, mappings = build_user_item_matrix(ratings_df)
    logger.info(f"Encoded {mappings['n_users']} users and {mappings['n_items']} movies")

    global_stats = calculate_global_statistics(ratings_df, mappings)
    logger.info(f"Global mean rating: {global_stats['global_mean']:.3f}")

    residual_matrix = compute_residual_matrix(ratings_matrix, global_stats)

    model = MatrixFactorizationRecommender(
        approximation_rank=approximation_rank,
        n_iterations=n_iterations,
        random_state=random_state
    )
    model.fit(
        residual_matrix=residual_matrix,
        mappings=mappings,
        global_stats=global_stats,
        rating_range=(float(ratings_df['rating'].min()), float(ratings_df['rating'].max())),
        input_schema=input_schema
    )

    logger.info(f"Trained rank-{model.effective_rank} factorization "
                f"({n_iterations} iterations) on {len(ratings_df)} ratings")
    return model

"""
Recommendation Pipeline Orchestrator

Main entry point for answering one recommendation request end to end:
1. Data loading
2. Model training
3. Model evaluation
4. Single prediction
5. Model serialization

Nothing is cached between calls; every run trains a fresh model.
"""

import time
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from . import config
from .data_io import MovieRating, MovieRatingPrediction, load_data, parse_movie_data
from .train import build_and_train_model
from .evaluate import RegressionMetrics, evaluate_model
from .predict import use_model_for_single_prediction
from .serialize import save_model, get_model_size

logger = logging.getLogger(__name__)


@dataclass
class RecommendationResult:
    """Outcome of one pipeline run."""
    message: str
    prediction: MovieRatingPrediction
    metrics: RegressionMetrics
    model_path: str
    model_size_mb: float
    elapsed_sec: float


def run_recommendation(rating: MovieRating,
                       train_path=None,
                       test_path=None,
                       model_path=None,
                       mf_config: Optional[Dict] = None) -> RecommendationResult:
    """
    Train, evaluate, predict and save in one pass.

    Args:
        rating: User/movie pair to score
        train_path: Training CSV (uses config.TRAIN_DATA_PATH if None)
        test_path: Test CSV (uses config.TEST_DATA_PATH if None)
        model_path: Where to save the fitted pipeline (uses config.MODEL_PATH if None)
        mf_config: Factorization hyperparameters (uses config.MF_CONFIG if None)

    Returns:
        RecommendationResult

    Raises:
        FileNotFoundError: If a data file is missing
        ValueError: If the data cannot be trained or evaluated on

    Example:
        >>> result = run_recommendation(MovieRating(user_id=6, movie_id=10))
        >>> print(result.message)
        Movie 10 is recommended for user 6
    """
    start_time = time.time()

    if model_path is None:
        model_path = config.MODEL_PATH
    if mf_config is None:
        mf_config = config.MF_CONFIG

    logger.info("[1/5] Loading data...")
    train_df, test_df = load_data(train_path, test_path)

    logger.info("[2/5] Building and training model...")
    model = build_and_train_model(train_df, mf_config)

    logger.info("[3/5] Evaluating model on test set...")
    metrics = evaluate_model(model, test_df)

    logger.info(f"[4/5] Predicting user {rating.user_id} / movie {rating.movie_id}...")
    message, prediction = use_model_for_single_prediction(model, rating)

    logger.info(f"[5/5] Saving model to {model_path}...")
    save_model(model, model_path)
    model_size_mb = get_model_size(model_path)
    logger.info(f"  Model size: {model_size_mb:.2f} MB")

    elapsed_sec = time.time() - start_time
    logger.info(f"Pipeline finished in {elapsed_sec:.2f} seconds")

    return RecommendationResult(
        message=message,
        prediction=prediction,
        metrics=metrics,
        model_path=str(model_path),
        model_size_mb=model_size_mb,
        elapsed_sec=elapsed_sec
    )


if __name__ == "__main__":
    """
    Run the pipeline from the command line.

    Usage:
        python -m movie_recommender.pipeline 6:10
        python -m movie_recommender.pipeline 6:10 --data-dir ./Data
    """
    import argparse
    from pathlib import Path

    logging.basicConfig(level=config.LOGGING_CONFIG['level'],
                        format=config.LOGGING_CONFIG['format'])

    parser = argparse.ArgumentParser(description='Train a model and score one user/movie pair')
    parser.add_argument('movie_data', type=str, help='"<userId>:<movieId>", e.g. 6:10')
    parser.add_argument('--data-dir', type=str, default=None,
                        help='Directory holding the train/test CSV files')
    parser.add_argument('--model-path', type=str, default=None,
                        help='Where to save the fitted model')
    args = parser.parse_args()

    try:
        movie_rating = parse_movie_data(args.movie_data)
    except ValueError as e:
        parser.error(str(e))

    train_path = test_path = None
    if args.data_dir:
        data_dir = Path(args.data_dir)
        train_path = data_dir / config.TRAIN_DATA_PATH.name
        test_path = data_dir / config.TEST_DATA_PATH.name

    result = run_recommendation(movie_rating, train_path=train_path,
                                test_path=test_path, model_path=args.model_path)

    print(result.message)

"""
Single Prediction Module

Scores one user/movie pair and turns the score into a recommendation sentence.
"""

import logging
import math

from . import config
from .data_io import MovieRating, MovieRatingPrediction
from .model import MatrixFactorizationRecommender

logger = logging.getLogger(__name__)


def predict_single(model: MatrixFactorizationRecommender,
                   rating: MovieRating) -> MovieRatingPrediction:
    """Score a single user/movie pair."""
    score = model.predict_rating(rating.user_id, rating.movie_id)
    return MovieRatingPrediction(user_id=rating.user_id, movie_id=rating.movie_id, score=score)


def is_recommended(score: float,
                   threshold: float = None,
                   digits: int = None) -> bool:
    """
    Decide whether a predicted score clears the recommendation cutoff.

    The score is rounded (half to even) before the strict comparison, so with
    the defaults 3.54 -> 3.5 is not recommended while 3.56 -> 3.6 is.
    A nan score (unknown user or movie) is never recommended.
    """
    if threshold is None:
        threshold = config.PREDICTION_CONFIG['score_threshold']
    if digits is None:
        digits = config.PREDICTION_CONFIG['round_digits']

    if score is None or math.isnan(score):
        return False
    return round(score, digits) > threshold


def format_result(rating: MovieRating, recommended: bool) -> str:
    if recommended:
        return f"Movie {rating.movie_id} is recommended for user {rating.user_id}"
    return f"Movie {rating.movie_id} is not recommended for user {rating.user_id}"


def use_model_for_single_prediction(model: MatrixFactorizationRecommender,
                                    rating: MovieRating):
    """
    Run one prediction and build the response text.

    Args:
        model: Trained recommendation model
        rating: User/movie pair to score

    Returns:
        Tuple of (result sentence, MovieRatingPrediction)
    """
    logger.info("=============== Making a prediction ===============")
    prediction = predict_single(model, rating)
    result = format_result(rating, is_recommended(prediction.score))

    logger.info(f"{result} (score={prediction.score:.3f})")
    return result, prediction

"""
Model Evaluation Module

Regression metrics for the rating model on held-out data:
- RMSE (Root Mean Squared Error)
- R-squared
- MAE / MSE
"""

import logging
from dataclasses import dataclass, asdict

import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from .model import MatrixFactorizationRecommender

logger = logging.getLogger(__name__)


@dataclass
class RegressionMetrics:
    """Regression quality of the model on a test set."""
    rmse: float
    r_squared: float
    mae: float
    mse: float
    n_scored: int  # rows the model could score
    n_unscored: int  # rows with an unknown user or movie

    def to_dict(self) -> dict:
        return asdict(self)


def evaluate_model(model: MatrixFactorizationRecommender,
                   test_df: pd.DataFrame) -> RegressionMetrics:
    """
    Evaluate the model on test data.

    Metric: How accurately the model predicts held-out ratings
    Data: Test set with ground truth ratings
    Operationalization: sklearn regression metrics over predicted vs actual

    Rows whose user or movie was not seen in training cannot be scored by the
    factorization; they are imputed with the training global mean.

    Args:
        model: Trained recommendation model
        test_df: Test DataFrame with user_id, movie_id, rating

    Returns:
        RegressionMetrics

    Raises:
        ValueError: If test_df has no labelled rows

    Example:
        >>> metrics = evaluate_model(model, test_df)
        >>> print(f"RMSE: {metrics.rmse:.4f}")
        RMSE: 0.8812
    """
    test_df_clean = test_df[test_df['rating'].notna()]
    if len(test_df_clean) == 0:
        raise ValueError("Test data has no labelled ratings to evaluate against")

    logger.info("=============== Evaluating the model ===============")

    actuals = test_df_clean['rating'].values.astype(np.float64)
    predictions = model.predict_batch(test_df_clean)

    unscored = np.isnan(predictions)
    predictions[unscored] = model.global_mean

    mse = float(mean_squared_error(actuals, predictions))
    # r2_score is undefined (nan) for a single sample
    r_squared = float(r2_score(actuals, predictions)) if len(actuals) > 1 else float('nan')

    metrics = RegressionMetrics(
        rmse=float(np.sqrt(mse)),
        r_squared=r_squared,
        mae=float(mean_absolute_error(actuals, predictions)),
        mse=mse,
        n_scored=int((~unscored).sum()),
        n_unscored=int(unscored.sum())
    )

    logger.info(f"Root Mean Squared Error : {metrics.rmse}")
    logger.info(f"RSquared: {metrics.r_squared}")
    if metrics.n_unscored:
        logger.info(f"{metrics.n_unscored} test ratings had an unknown user or movie")

    return metrics

"""
Matrix Factorization Recommendation Model

Key-encoded matrix factorization with bias terms for predicting
user/movie ratings. The low-rank factorization itself is delegated to
scikit-learn's TruncatedSVD (randomized solver).

Prediction formula: r_ui = μ + b_u + b_i + q_i^T * p_u

Where:
- μ = global mean rating
- b_u = user bias
- b_i = item bias
- q_i = item latent factors
- p_u = user latent factors
"""

import numpy as np
import pandas as pd
from sklearn.decomposition import TruncatedSVD
from typing import Dict, Optional, Tuple


class MatrixFactorizationRecommender:
    """
    Fitted key-encoding + matrix-factorization pipeline.

    Holds the user/movie key mappings learned from the training data together
    with the latent factors and bias terms, so a pickled instance is enough
    to score new pairs.
    """

    def __init__(self, approximation_rank: int = 100, n_iterations: int = 20,
                 random_state: Optional[int] = 42):
        """
        Initialize the model.

        Args:
            approximation_rank: Number of latent factors to learn
            n_iterations: Number of iterations of the randomized SVD solver
            random_state: Seed for the solver (None for non-deterministic)
        """
        self.approximation_rank = approximation_rank
        self.n_iterations = n_iterations
        self.random_state = random_state

        # Learned parameters (set during fit())
        self.user_factors = None  # Shape: (n_users, k)
        self.item_factors = None  # Shape: (n_items, k)
        self.global_mean = None
        self.user_bias = None  # Shape: (n_users,)
        self.item_bias = None  # Shape: (n_items,)
        self.effective_rank = 0
        self.rating_range: Tuple[float, float] = (-np.inf, np.inf)

        # Key encoding
        self.user_mapping = {}  # {user_id: index}
        self.item_mapping = {}  # {movie_id: index}
        self.reverse_user_mapping = {}
        self.reverse_item_mapping = {}
        self.n_users = 0
        self.n_items = 0

        # Column names/dtypes of the training data, persisted with the model
        self.input_schema: Dict[str, str] = {}

    @property
    def is_fitted(self) -> bool:
        return self.user_factors is not None

    def fit(self, residual_matrix, mappings: dict, global_stats: dict,
            rating_range: Tuple[float, float] = None,
            input_schema: Dict[str, str] = None) -> "MatrixFactorizationRecommender":
        """
        Factorize the residual rating matrix.

        Args:
            residual_matrix: Sparse user-item matrix of ratings minus biases
            mappings: Dict with user/item mappings from feature_engineering
            global_stats: Dict with global_mean, user_biases, item_biases
            rating_range: (min, max) rating seen in training, used to clip scores
            input_schema: Training column names -> dtype names

        Returns:
            self

        Raises:
            ValueError: If there are fewer than two users or two movies
        """
        n_users, n_items = mappings['n_users'], mappings['n_items']
        k = min(self.approximation_rank, min(n_users, n_items) - 1)
        if k < 1:
            raise ValueError(
                f"Need at least 2 users and 2 movies to factorize, got {n_users} users and {n_items} movies"
            )

        self.user_mapping = mappings['user_mapping']
        self.item_mapping = mappings['item_mapping']
        self.reverse_user_mapping = mappings['reverse_user_mapping']
        self.reverse_item_mapping = mappings['reverse_item_mapping']
        self.n_users = n_users
        self.n_items = n_items

        self.global_mean = global_stats['global_mean']
        self.user_bias = global_stats['user_biases']
        self.item_bias = global_stats['item_biases']

        if rating_range is not None:
            self.rating_range = rating_range
        if input_schema is not None:
            self.input_schema = dict(input_schema)

        self.effective_rank = k

        # Biases already explain every rating: nothing left to factorize
        if residual_matrix.nnz == 0 or np.allclose(residual_matrix.data, 0.0):
            self.user_factors = np.zeros((n_users, k), dtype=np.float32)
            self.item_factors = np.zeros((n_items, k), dtype=np.float32)
            return self

        svd = TruncatedSVD(
            n_components=k,
            algorithm="randomized",
            n_iter=self.n_iterations,
            random_state=self.random_state
        )
        # fit_transform returns U * Sigma; components_ is V^T
        self.user_factors = svd.fit_transform(residual_matrix).astype(np.float32)
        self.item_factors = svd.components_.T.astype(np.float32)

        return self

    def _check_fitted(self) -> None:
        if not self.is_fitted:
            raise RuntimeError("Model is not trained. Call fit() first.")

    def predict_rating(self, user_id: int, movie_id: int) -> float:
        """
        Predict rating for a single user-movie pair.

        Args:
            user_id: User identifier
            movie_id: Movie identifier

        Returns:
            Predicted rating clipped to the training rating range,
            or nan when the user or movie was not seen in training
        """
        self._check_fitted()

        user_idx = self.user_mapping.get(user_id)
        item_idx = self.item_mapping.get(movie_id)
        if user_idx is None or item_idx is None:
            return float('nan')

        prediction = (np.dot(self.user_factors[user_idx], self.item_factors[item_idx]) +
                      self.global_mean +
                      self.user_bias[user_idx] +
                      self.item_bias[item_idx])

        return float(np.clip(prediction, *self.rating_range))

    def predict_batch(self, ratings_df: pd.DataFrame) -> np.ndarray:
        """
        Score every row of a DataFrame (VECTORIZED).

        Args:
            ratings_df: DataFrame with user_id and movie_id columns

        Returns:
            Array of scores aligned with ratings_df rows; nan for unknown pairs
        """
        self._check_fitted()

        user_indices = ratings_df['user_id'].map(self.user_mapping)
        item_indices = ratings_df['movie_id'].map(self.item_mapping)
        valid_mask = (user_indices.notna() & item_indices.notna()).values

        scores = np.full(len(ratings_df), np.nan, dtype=np.float64)
        if valid_mask.any():
            u_idx = user_indices[valid_mask].astype(int).values
            i_idx = item_indices[valid_mask].astype(int).values

            pred = (self.global_mean +
                    self.user_bias[u_idx] +
                    self.item_bias[i_idx] +
                    np.sum(self.user_factors[u_idx] * self.item_factors[i_idx], axis=1))
            scores[valid_mask] = np.clip(pred, *self.rating_range)

        return scores

    def get_model_info(self) -> dict:
        """
        Get model metadata and statistics.

        Returns:
            Dict with n_users, n_items, rank, etc.
        """
        return {
            'algorithm': 'Matrix Factorization (TruncatedSVD) with Bias Terms',
            'approximation_rank': self.approximation_rank,
            'effective_rank': self.effective_rank,
            'n_iterations': self.n_iterations,
            'total_users': self.n_users,
            'total_movies': self.n_items,
            'global_mean': self.global_mean,
            'matrix_size': f"{self.n_users}×{self.n_items}",
            'input_schema': self.input_schema
        }

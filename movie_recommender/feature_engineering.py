"""
Feature Engineering Module

Handles creation of features for model training:
- User/movie key encoding (raw id -> dense index)
- Sparse user-item rating matrix construction
- Global mean and user/item bias terms
- Residual matrix for the factorization step
"""

import pandas as pd
import numpy as np
from scipy.sparse import csr_matrix
from typing import Tuple, Dict


def create_user_item_mappings(ratings_df: pd.DataFrame) -> Dict:
    """
    Create bidirectional mappings between user/movie IDs and integer indices.

    Keys are assigned in order of first occurrence, so the same file always
    produces the same encoding.

    Args:
        ratings_df: DataFrame with user_id and movie_id columns

    Returns:
        Dict with user_mapping, item_mapping, reverse_user_mapping,
        reverse_item_mapping, n_users, n_items
    """
    unique_users = ratings_df['user_id'].unique().tolist()
    unique_items = ratings_df['movie_id'].unique().tolist()

    user_mapping = {user: idx for idx, user in enumerate(unique_users)}
    item_mapping = {item: idx for idx, item in enumerate(unique_items)}

    reverse_user_mapping = {idx: user for user, idx in user_mapping.items()}
    reverse_item_mapping = {idx: item for item, idx in item_mapping.items()}

    return {
        'user_mapping': user_mapping,
        'item_mapping': item_mapping,
        'reverse_user_mapping': reverse_user_mapping,
        'reverse_item_mapping': reverse_item_mapping,
        'n_users': len(unique_users),
        'n_items': len(unique_items)
    }


def build_user_item_matrix(ratings_df: pd.DataFrame) -> Tuple[csr_matrix, Dict]:
    """
    Build sparse user-item rating matrix and create index mappings.

    Args:
        ratings_df: DataFrame with columns: user_id, movie_id, rating

    Returns:
        Tuple of (sparse_matrix, mappings_dict) where sparse_matrix has
        shape (n_users, n_items)

    Example:
        >>> matrix, mappings = build_user_item_matrix(train_df)
        >>> print(matrix.shape)
        (610, 9724)
    """
    mappings = create_user_item_mappings(ratings_df)

    user_indices = ratings_df['user_id'].map(mappings['user_mapping']).values
    item_indices = ratings_df['movie_id'].map(mappings['item_mapping']).values
    ratings = ratings_df['rating'].values

    sparse_matrix = csr_matrix(
        (ratings, (user_indices, item_indices)),
        shape=(mappings['n_users'], mappings['n_items']),
        dtype=np.float32
    )

    return sparse_matrix, mappings


def calculate_global_statistics(ratings_df: pd.DataFrame, mappings: Dict) -> Dict:
    """
    Calculate global statistics for bias modeling.

    Args:
        ratings_df: DataFrame with user_id, movie_id, rating
        mappings: Dict with user_mapping and item_mapping

    Returns:
        Dict with:
        - global_mean: float (mean rating across all ratings)
        - user_biases: np.array (user bias = user_mean - global_mean)
        - item_biases: np.array (item bias = item_mean - global_mean)
    """
    global_mean = float(ratings_df['rating'].mean())

    user_means = ratings_df.groupby('user_id')['rating'].mean()
    item_means = ratings_df.groupby('movie_id')['rating'].mean()

    user_biases = np.zeros(mappings['n_users'])
    item_biases = np.zeros(mappings['n_items'])

    user_idx = user_means.index.map(mappings['user_mapping']).values.astype(int)
    item_idx = item_means.index.map(mappings['item_mapping']).values.astype(int)
    user_biases[user_idx] = user_means.values - global_mean
    item_biases[item_idx] = item_means.values - global_mean

    return {
        'global_mean': global_mean,
        'user_biases': user_biases,
        'item_biases': item_biases
    }


def compute_residual_matrix(ratings_matrix: csr_matrix, global_stats: Dict) -> csr_matrix:
    """
    Subtract global mean and biases from every stored rating.

    r_adjusted = r - global_mean - user_bias - item_bias

    Args:
        ratings_matrix: Sparse rating matrix from build_user_item_matrix()
        global_stats: Output of calculate_global_statistics()

    Returns:
        Sparse residual matrix with the same shape and sparsity pattern
    """
    coo = ratings_matrix.tocoo()

    adjusted_ratings = (
        coo.data -
        global_stats['global_mean'] -
        global_stats['user_biases'][coo.row] -
        global_stats['item_biases'][coo.col]
    )

    return csr_matrix(
        (adjusted_ratings, (coo.row, coo.col)),
        shape=ratings_matrix.shape,
        dtype=np.float32
    )

"""
Pytest configuration and shared fixtures

This file contains fixtures that are available to all test files.
"""

import pytest
import pandas as pd

# ---------------------------------------------------
# DataFrame fixtures
# ---------------------------------------------------

USER_OFFSETS = {1: 1.0, 2: 0.5, 3: -0.5, 4: -1.0}
MOVIE_OFFSETS = {10: 1.0, 20: 0.5, 30: -0.5, 40: -1.0}


def _additive_ratings():
    """
    Full 4 users x 4 movies grid with rating = 3 + user offset + movie offset,
    so biases explain almost everything. User 1 / movie 10 rates 5.0 and
    user 4 / movie 40 rates 1.0.
    """
    rows = []
    for i, (user_id, u_off) in enumerate(USER_OFFSETS.items()):
        for j, (movie_id, m_off) in enumerate(MOVIE_OFFSETS.items()):
            rows.append({
                'user_id': user_id,
                'movie_id': movie_id,
                'rating': 3.0 + u_off + m_off,
                'timestamp': 1_600_000_000 + i * 10 + j,
            })
    df = pd.DataFrame(rows)
    # One off-pattern rating so the residual matrix is not all zeros
    df.loc[(df['user_id'] == 2) & (df['movie_id'] == 30), 'rating'] = 3.5
    return df


@pytest.fixture
def tiny_ratings_df():
    """Tiny ratings DataFrame (4 users, 4 movies) for unit tests"""
    return _additive_ratings()


@pytest.fixture
def tiny_test_df():
    """Held-out ratings, including one pair with an unknown user"""
    return pd.DataFrame({
        'user_id': [1, 4, 2, 99],
        'movie_id': [10, 40, 20, 10],
        'rating': [5.0, 1.0, 4.0, 3.0],
    })


# ---------------------------------------------------
# CSV fixtures
# ---------------------------------------------------

def _to_source_csv(df: pd.DataFrame, path) -> None:
    """Write a DataFrame with the source file's column names."""
    out = df.rename(columns={'user_id': 'userId', 'movie_id': 'movieId'})
    out.to_csv(path, index=False)


@pytest.fixture
def data_dir(tmp_path, tiny_ratings_df, tiny_test_df):
    """
    Temporary data directory holding train and test CSV files.
    Automatically cleaned up after test.
    """
    out_dir = tmp_path / "Data"
    out_dir.mkdir()

    _to_source_csv(tiny_ratings_df, out_dir / "recommendation-ratings-train.csv")
    test_df = tiny_test_df.copy()
    test_df['timestamp'] = 1_700_000_000
    _to_source_csv(test_df, out_dir / "recommendation-ratings-test.csv")

    return out_dir


@pytest.fixture
def train_csv_path(data_dir):
    return data_dir / "recommendation-ratings-train.csv"


@pytest.fixture
def test_csv_path(data_dir):
    return data_dir / "recommendation-ratings-test.csv"


# ---------------------------------------------------
# Model fixtures
# ---------------------------------------------------

@pytest.fixture
def small_mf_config():
    return {"approximation_rank": 10, "n_iterations": 20, "random_state": 42}


@pytest.fixture
def trained_model(tiny_ratings_df, small_mf_config):
    """Pre-fitted MatrixFactorizationRecommender for quick tests."""
    from movie_recommender.train import build_and_train_model

    return build_and_train_model(tiny_ratings_df, small_mf_config)

"""
Configuration file for the Movie Recommender

Contains all hyperparameters, paths, and constants used across the pipeline.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ============================================================================
# PATHS
# ============================================================================

PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", PROJECT_ROOT / "Data"))

TRAIN_DATA_PATH = DATA_DIR / "recommendation-ratings-train.csv"
TEST_DATA_PATH = DATA_DIR / "recommendation-ratings-test.csv"
MODEL_PATH = DATA_DIR / os.getenv("MODEL_FILE", "MovieRecommenderModel.pkl")

# ============================================================================
# CSV LOADING
# ============================================================================

CSV_CONFIG = {
    "has_header": True,
    "separator": ",",
    # Source column name -> pipeline column name
    "column_aliases": {
        "userId": "user_id",
        "movieId": "movie_id",
        "rating": "rating",
        "Label": "rating",
    },
    "required_columns": ["user_id", "movie_id", "rating"],
}

# ============================================================================
# MODEL HYPERPARAMETERS
# ============================================================================

MF_CONFIG = {
    "approximation_rank": 100,  # Number of latent factors
    "n_iterations": 20,  # Power iterations of the randomized SVD solver
    "random_state": 42,  # Random seed for reproducibility
}

# ============================================================================
# PREDICTION
# ============================================================================

PREDICTION_CONFIG = {
    "score_threshold": 3.5,  # Rounded score must be strictly above this
    "round_digits": 1,
}

# ============================================================================
# SERVING CONFIGURATION
# ============================================================================

SERVING_CONFIG = {
    "host": "0.0.0.0",
    "port": int(os.getenv("PORT", 7071)),
    "debug": False,
    "route": "/api/MovieRecommender",
    "query_parameter": "movieData",
    # Function-level auth: when set, requests must carry ?code= or x-functions-key
    "function_key": os.getenv("FUNCTION_KEY") or None,
}

# ============================================================================
# LOGGING
# ============================================================================

LOGGING_CONFIG = {
    "level": os.getenv("LOG_LEVEL", "INFO"),
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "malformed_log_file": os.getenv("MALFORMED_LOG_FILE") or None,
}

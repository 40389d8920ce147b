"""
Movie Recommender Package

Serverless-style recommendation endpoint that, on every request:
- Loads the train/test ratings CSV files
- Trains a key-encoding + matrix-factorization pipeline
- Evaluates it (RMSE, R-squared)
- Scores one user/movie pair against a fixed cutoff
- Saves the fitted pipeline to disk
"""

__version__ = "1.0.0"

"""
Tests for movie_recommender.data_io module
------------------------------------------
Covers:
- load_ratings_csv()
- load_data()
- parse_movie_data()
"""

import pytest
import pandas as pd
from movie_recommender import data_io
from movie_recommender.data_io import MovieRating


# -------------------------------------------------------------------
# Tests for load_ratings_csv()
# -------------------------------------------------------------------

class TestLoadRatingsCsv:
    """Unit tests for CSV loading"""

    def test_columns_renamed(self, train_csv_path):
        """Source column names should be normalized."""
        df = data_io.load_ratings_csv(train_csv_path)
        assert {"user_id", "movie_id", "rating", "timestamp"} <= set(df.columns)
        assert "userId" not in df.columns
        assert len(df) == 16

    def test_dtypes(self, train_csv_path):
        """IDs should be integers and ratings floats."""
        df = data_io.load_ratings_csv(train_csv_path)
        assert pd.api.types.is_integer_dtype(df["user_id"])
        assert pd.api.types.is_integer_dtype(df["movie_id"])
        assert pd.api.types.is_float_dtype(df["rating"])

    def test_label_column_alias(self, tmp_path):
        """A 'Label' column should be read as the rating."""
        path = tmp_path / "ratings.csv"
        path.write_text("userId,movieId,Label\n1,2,4.5\n")
        df = data_io.load_ratings_csv(path)
        assert df.loc[0, "rating"] == pytest.approx(4.5)

    def test_missing_file(self, tmp_path):
        """Missing file should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            data_io.load_ratings_csv(tmp_path / "missing.csv")

    def test_missing_column(self, tmp_path):
        """A file without a rating column is rejected."""
        path = tmp_path / "ratings.csv"
        path.write_text("userId,movieId\n1,2\n")
        with pytest.raises(ValueError, match="rating"):
            data_io.load_ratings_csv(path)

    def test_malformed_rows_dropped(self, tmp_path):
        """Rows with non-numeric or empty values should be dropped."""
        path = tmp_path / "ratings.csv"
        path.write_text(
            "userId,movieId,rating,timestamp\n"
            "1,10,4.0,100\n"
            "abc,10,3.0,101\n"
            "2,,5.0,102\n"
            "3,30,4.5,103\n"
        )
        df = data_io.load_ratings_csv(path)
        assert df["user_id"].tolist() == [1, 3]
        assert df["movie_id"].tolist() == [10, 30]

    def test_fractional_ids_dropped(self, tmp_path, caplog):
        """Fractional ids are malformed, not truncated onto another id."""
        path = tmp_path / "ratings.csv"
        path.write_text(
            "userId,movieId,rating\n"
            "1.7,10,4.0\n"
            "2,20.9,3.0\n"
            "3.0,30,4.5\n"
        )
        with caplog.at_level("WARNING", logger="movie_recommender.data_io"):
            df = data_io.load_ratings_csv(path)

        assert df["user_id"].tolist() == [3]
        assert df["movie_id"].tolist() == [30]
        assert "Dropped 2 malformed rows" in caplog.text

    def test_rating_and_label_both_present(self, tmp_path):
        """Two columns mapping onto 'rating' are a ValueError, not a crash."""
        path = tmp_path / "ratings.csv"
        path.write_text("userId,movieId,rating,Label\n1,10,4.0,4.0\n")
        with pytest.raises(ValueError, match="rating"):
            data_io.load_ratings_csv(path)



def test_load_data(train_csv_path, test_csv_path):
    """load_data should return (train_df, test_df)."""
    train_df, test_df = data_io.load_data(train_csv_path, test_csv_path)
    assert len(train_df) == 16
    assert len(test_df) == 4


# -------------------------------------------------------------------
# Tests for parse_movie_data()
# -------------------------------------------------------------------

class TestParseMovieData:
    """Unit tests for the userId:movieId parser"""

    def test_valid(self):
        assert data_io.parse_movie_data("6:10") == MovieRating(user_id=6, movie_id=10)

    def test_whitespace_ignored(self):
        assert data_io.parse_movie_data(" 6 : 10 ") == MovieRating(user_id=6, movie_id=10)

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_blank(self, value):
        with pytest.raises(ValueError, match="Please pass movieData"):
            data_io.parse_movie_data(value)

    @pytest.mark.parametrize("value", ["6", "6:10:3", "6-10"])
    def test_wrong_shape(self, value):
        with pytest.raises(ValueError, match="<userId>:<movieId>"):
            data_io.parse_movie_data(value)

    @pytest.mark.parametrize("value", ["a:10", "6:b", "6.5:10", "+6:10", "6_0:10", "6:1_0", "\u0666:10", "-1:10"])
    def test_not_integers(self, value):
        with pytest.raises(ValueError, match="integers"):
            data_io.parse_movie_data(value)

    def test_non_positive(self):
        with pytest.raises(ValueError, match="positive"):
            data_io.parse_movie_data("0:10")

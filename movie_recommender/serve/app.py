"""
Movie Recommendation API Service

Flask web service wrapping the recommendation pipeline.
Endpoint: GET /api/MovieRecommender?movieData=<userId>:<movieId>
Returns: Plain-text sentence saying whether the movie is recommended for the user

Every request trains, evaluates and saves a fresh model before answering.

Enhanced with:
- Request validation
- Malformed request handling
- Optional function-key authorization
- Request IDs and model quality headers
"""

import hmac
import logging
import time
import uuid
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Dict, Optional, Tuple

from flask import Flask, jsonify, make_response, request

from .. import config
from ..data_io import MovieRating, parse_movie_data
from ..pipeline import RecommendationResult, run_recommendation

logging.basicConfig(
    level=config.LOGGING_CONFIG['level'],
    format=config.LOGGING_CONFIG['format']
)
logger = logging.getLogger(__name__)

# Separate logger for malformed requests
malformed_logger = logging.getLogger('malformed_requests')
malformed_logger.setLevel(logging.WARNING)
if config.LOGGING_CONFIG['malformed_log_file']:
    malformed_handler = logging.FileHandler(config.LOGGING_CONFIG['malformed_log_file'])
    malformed_handler.setFormatter(logging.Formatter(
        '%(asctime)s - MALFORMED - %(message)s'
    ))
    malformed_logger.addHandler(malformed_handler)

app = Flask(__name__)

ROUTE = config.SERVING_CONFIG['route']
QUERY_PARAMETER = config.SERVING_CONFIG['query_parameter']


class RequestValidator:
    """
    Validates API requests for correct format and content.
    """

    @staticmethod
    def validate_function_key(provided: Optional[str],
                              expected: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Check the caller's function key.

        Args:
            provided: Key from the `code` query parameter or `x-functions-key` header
            expected: Configured key; None disables the check

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not expected:
            return True, None
        if not provided:
            return False, "A function key is required (code query parameter or x-functions-key header)"
        if not hmac.compare_digest(provided.encode(), expected.encode()):
            return False, "Invalid function key"
        return True, None

    @staticmethod
    def validate_movie_data(movie_data: Optional[str]) -> Tuple[bool, Optional[str], Optional[MovieRating]]:
        """
        Validate the movieData query parameter.

        Args:
            movie_data: Raw "userId:movieId" value

        Returns:
            Tuple of (is_valid, error_message, parsed_rating)
        """
        try:
            return True, None, parse_movie_data(movie_data)
        except ValueError as e:
            return False, str(e), None


def log_malformed_request(error_type: str, details: Dict) -> None:
    """
    Log malformed request with detailed information.

    Args:
        error_type: Type of validation error
        details: Dictionary with request details
    """
    log_entry = {
        'timestamp': datetime.now().isoformat(),
        'error_type': error_type,
        'ip': request.remote_addr,
        'path': request.path,
        'method': request.method,
        'user_agent': request.headers.get('User-Agent', 'Unknown'),
        'details': details
    }

    malformed_logger.warning(f"{error_type}: {log_entry}")


def _plain_text(body: str, status: int):
    resp = make_response(body, status)
    resp.headers['Content-Type'] = 'text/plain; charset=utf-8'
    return resp


def validate_request(f):
    """
    Decorator to validate incoming requests.
    Checks the function key and movieData, and logs malformed requests.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        provided_key = request.args.get('code') or request.headers.get('x-functions-key')
        is_valid, error_msg = RequestValidator.validate_function_key(
            provided_key, config.SERVING_CONFIG['function_key']
        )
        if not is_valid:
            log_malformed_request('UNAUTHORIZED', {'error': error_msg})
            return jsonify({
                'error': 'Unauthorized',
                'message': error_msg
            }), 401

        movie_data = request.args.get(QUERY_PARAMETER)
        is_valid, error_msg, movie_rating = RequestValidator.validate_movie_data(movie_data)
        if not is_valid:
            log_malformed_request(
                'INVALID_MOVIE_DATA',
                {
                    QUERY_PARAMETER: movie_data,
                    'error': error_msg,
                    'query_params': {k: v for k, v in request.args.items() if k != 'code'}
                }
            )
            return _plain_text(error_msg, 400)

        kwargs['movie_rating'] = movie_rating
        return f(*args, **kwargs)

    return decorated_function


class RecommenderService:
    """
    Wrapper service around the train-and-predict pipeline.
    Holds the data and model paths; no model is kept between requests.
    """

    def __init__(self, train_path=None, test_path=None, model_path=None):
        """
        Initialize recommender service.

        Args:
            train_path: Training CSV (uses config default if None)
            test_path: Test CSV (uses config default if None)
            model_path: Where each trained model is saved (uses config default if None)
        """
        self.train_path = train_path or config.TRAIN_DATA_PATH
        self.test_path = test_path or config.TEST_DATA_PATH
        self.model_path = model_path or config.MODEL_PATH

    def data_available(self) -> Dict[str, bool]:
        return {
            'train': Path(self.train_path).exists(),
            'test': Path(self.test_path).exists()
        }

    def recommend(self, movie_rating: MovieRating) -> Tuple[RecommendationResult, str]:
        """
        Train a model and score one user/movie pair.

        Args:
            movie_rating: Parsed request input

        Returns:
            Tuple of (RecommendationResult, request_id)
        """
        req_id = str(uuid.uuid4())
        result = run_recommendation(
            movie_rating,
            train_path=self.train_path,
            test_path=self.test_path,
            model_path=self.model_path
        )
        return result, req_id


# Global service instance
recommender = None


def initialize_service(train_path=None, test_path=None, model_path=None) -> None:
    """
    Initialize the recommender service.

    Args:
        train_path: Training CSV (uses config default if None)
        test_path: Test CSV (uses config default if None)
        model_path: Model output path (uses config default if None)
    """
    global recommender

    recommender = RecommenderService(train_path, test_path, model_path)
    logger.info(f"Recommender service initialized (data: {recommender.train_path}, {recommender.test_path})")


@app.errorhandler(404)
def not_found(error):
    """Handle 404 Not Found errors."""
    log_malformed_request(
        'ENDPOINT_NOT_FOUND',
        {
            'path': request.path,
            'method': request.method
        }
    )
    return jsonify({
        'error': 'Not Found',
        'message': 'The requested endpoint does not exist',
        'available_endpoints': ['/health', ROUTE, '/']
    }), 404


@app.errorhandler(405)
def method_not_allowed(error):
    """Handle 405 Method Not Allowed errors."""
    allowed_methods = list(getattr(error, 'valid_methods', None) or [])
    log_malformed_request(
        'METHOD_NOT_ALLOWED',
        {
            'path': request.path,
            'method': request.method,
            'allowed_methods': allowed_methods
        }
    )
    return jsonify({
        'error': 'Method Not Allowed',
        'message': f'The {request.method} method is not allowed for this endpoint',
        'allowed_methods': allowed_methods
    }), 405


@app.errorhandler(500)
def internal_error(error):
    """Handle 500 Internal Server Error."""
    logger.error(f"Internal server error: {error}", exc_info=True)
    return jsonify({
        'error': 'Internal Server Error',
        'message': 'An unexpected error occurred'
    }), 500


@app.before_request
def log_request():
    """Log all incoming requests."""
    logger.info(f"Request: {request.method} {request.path} from {request.remote_addr}")


@app.route('/health', methods=['GET'])
def health_check():
    """
    Health check endpoint.

    Returns:
        JSON with service status and data file availability
    """
    if not recommender:
        initialize_service()

    data_files = recommender.data_available()
    return jsonify({
        'status': 'healthy' if all(data_files.values()) else 'degraded',
        'data_files': data_files,
        'timestamp': datetime.now().isoformat()
    })


@app.route(ROUTE, methods=['GET'])
@validate_request
def recommend_movie(movie_rating: MovieRating):
    """
    Decide whether a movie is recommended for a user.

    Query Parameters:
        movieData: "<userId>:<movieId>" (required)
        code: Function key (required only when FUNCTION_KEY is configured)

    Returns:
        Plain text recommendation sentence

    Example:
        GET /api/MovieRecommender?movieData=6:10
        Response: Movie 10 is recommended for user 6

    Error Responses:
        400: Missing or malformed movieData
        401: Missing or wrong function key
        503: Ratings data not available
        500: Server error
    """
    start_time = time.time()

    try:
        if not recommender:
            logger.warning("Recommender not initialized, initializing now")
            initialize_service()

        result, req_id = recommender.recommend(movie_rating)

        response_time = time.time() - start_time
        logger.info(
            f"SUCCESS - user={movie_rating.user_id}, movie={movie_rating.movie_id}, "
            f"score={result.prediction.score:.3f}, rmse={result.metrics.rmse:.4f}, "
            f"response_time={response_time:.3f}s"
        )

        resp = _plain_text(result.message, 200)
        resp.headers['X-Request-Id'] = req_id
        resp.headers['X-Model-RMSE'] = f"{result.metrics.rmse:.6f}"
        resp.headers['X-Model-RSquared'] = f"{result.metrics.r_squared:.6f}"
        return resp

    except FileNotFoundError as e:
        logger.error(f"Ratings data not available: {e}")
        return jsonify({
            'error': 'Service error',
            'message': 'Ratings data not available'
        }), 503

    except ValueError as e:
        logger.error(f"ValueError in recommend endpoint: {e}", exc_info=True)
        return jsonify({
            'error': 'Invalid data',
            'message': str(e)
        }), 500

    except Exception as e:
        logger.error(f"Unexpected error in recommend endpoint: {e}", exc_info=True)

        req_id = str(uuid.uuid4())
        resp = make_response(jsonify({
            'error': 'Internal error',
            'message': 'Error generating recommendation'
        }), 500)
        resp.headers['X-Request-Id'] = req_id
        return resp


@app.route('/', methods=['GET'])
def root():
    """
    Root endpoint with service information.

    Returns:
        JSON with service metadata
    """
    return jsonify({
        'service': 'Movie Recommender',
        'version': '1.0',
        'endpoints': {
            'health': {
                'path': '/health',
                'method': 'GET',
                'description': 'Check service health'
            },
            'recommend': {
                'path': ROUTE,
                'method': 'GET',
                'description': 'Train a model and decide whether a movie is recommended for a user',
                'parameters': {
                    QUERY_PARAMETER: 'Required query parameter "<userId>:<movieId>" (positive integers)',
                    'code': 'Function key, required when the service is configured with one'
                },
                'example': f'{ROUTE}?{QUERY_PARAMETER}=6:10'
            }
        },
        'timestamp': datetime.now().isoformat()
    })


if __name__ == '__main__':
    initialize_service()

    host = config.SERVING_CONFIG['host']
    port = config.SERVING_CONFIG['port']
    debug = config.SERVING_CONFIG['debug']

    logger.info(f"Starting Flask server on {host}:{port}")
    app.run(host=host, port=port, debug=debug)

#!/usr/bin/env python3
"""
Production server runner using Gunicorn
"""

import os
import subprocess
import sys
from pathlib import Path

from movie_recommender import config


def main():
    """Run the recommendation server"""

    project_root = Path(__file__).resolve().parent.parent
    port = os.getenv('PORT', config.SERVING_CONFIG['port'])

    for path in (config.TRAIN_DATA_PATH, config.TEST_DATA_PATH):
        if not path.exists():
            print(f"WARNING: Data file not found at {path}")
            print("Requests will fail with 503 until the ratings CSV files are in place")

    # Each request trains a model, so keep workers few and timeouts generous
    cmd = [
        "gunicorn",
        "--bind", f"0.0.0.0:{port}",
        "--workers", "2",
        "--timeout", "120",
        "--keep-alive", "2",
        "--max-requests", "1000",
        "--max-requests-jitter", "100",
        "--access-logfile", "-",
        "--error-logfile", "-",
        "--chdir", str(project_root),
        "movie_recommender.serve.app:app"
    ]

    print("Starting recommendation server...")
    print(f"Command: {' '.join(cmd)}")
    print(f"Test endpoint: http://0.0.0.0:{port}{config.SERVING_CONFIG['route']}?movieData=6:10")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        print("\nServer stopped by user")
    except subprocess.CalledProcessError as e:
        print(f"Server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()

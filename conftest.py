"""
Pytest configuration for TrustGate tests.
Sets up the Python path and the environment the settings are loaded from.
"""

import os
import sys
from pathlib import Path

# Add the project root to Python path for all tests
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

# Set up test environment variables
os.environ.setdefault("DATABASE_HOST", "localhost")
os.environ.setdefault("DATABASE_PORT", "5432")
os.environ.setdefault("DATABASE_NAME", "image_kyc_test")
os.environ.setdefault("DATABASE_USER", "kyc_user")
os.environ.setdefault("DATABASE_PASSWORD", "kyc_password")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-signing-secret-0001")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-signing-secret-0002")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DEBUG", "true")

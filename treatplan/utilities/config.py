"""Configuration management for the treatment plan service."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO').upper()

# Record store (patient records holding the discussed-items field)
RECORD_STORE_BACKEND: Final[str] = os.getenv('RECORD_STORE_BACKEND', 'file').strip().lower()
RECORD_STORE_URL: Final[str] = os.getenv('RECORD_STORE_URL', 'http://localhost:3001')
RECORD_STORE_TIMEOUT: Final[float] = float(os.getenv('RECORD_STORE_TIMEOUT', '10'))
DISCUSSED_FIELD: Final[str] = os.getenv('DISCUSSED_FIELD', 'Treatments Discussed')

# Share message signature
PROVIDER_NAME: Final[str] = os.getenv('PROVIDER_NAME', 'We')

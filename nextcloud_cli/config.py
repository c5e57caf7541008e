"""
CLI configuration loaded from environment variables / .env file.

Every value can be overridden by a command-line flag, so nothing is
required here.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(Path.cwd() / ".env")

NEXTCLOUD_URL = os.environ.get("NEXTCLOUD_URL", "")
NEXTCLOUD_USERNAME = os.environ.get("NEXTCLOUD_USERNAME", "")
NEXTCLOUD_PASSWORD = os.environ.get("NEXTCLOUD_PASSWORD", "")
NEXTCLOUD_PATH = os.environ.get("NEXTCLOUD_PATH", "")

# Empty means no timeout (requests' default).
NEXTCLOUD_TIMEOUT = float(os.environ["NEXTCLOUD_TIMEOUT"]) if os.environ.get("NEXTCLOUD_TIMEOUT") else None
NEXTCLOUD_ERROR_DETECTION = os.environ.get("NEXTCLOUD_ERROR_DETECTION", "body")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

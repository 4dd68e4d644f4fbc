"""Global constants for the plugin update service."""

import os
from pathlib import Path

# Directory paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent

PLUGINS_DIR = PROJECT_ROOT / "plugins"
BUNDLED_PLUGINS_DIR = PLUGINS_DIR / "bundled"      # shipped with the service
INSTALLED_PLUGINS_DIR = PLUGINS_DIR / "installed"  # dropped in by operators
PLUGIN_CONFIG_FILE = PLUGINS_DIR / "config.json"

# How long fetched update metadata stays cached (seconds, default one day)
CACHE_TIME = int(os.getenv("UPDATE_CACHE_TIME", str(24 * 60 * 60)))

# Timeout for the metadata request (seconds)
REQUEST_TIMEOUT = float(os.getenv("UPDATE_REQUEST_TIMEOUT", "30"))

# {{username}} and {{repository}} are replaced per plugin
REPOSITORY_BASE_URL = os.getenv(
    "UPDATE_REPOSITORY_BASE_URL",
    "https://api.github.com/repos/{{username}}/{{repository}}/contents/wp-dist/data.json",
)

USER_AGENT = os.getenv("UPDATE_USER_AGENT", "WordPress-Request")

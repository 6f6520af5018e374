from pathlib import Path

# This calculates the absolute path to the project's root directory
# It starts from this file's location (.../src/hyperbeam/config.py) and goes up three levels.
ROOT_DIR = Path(__file__).resolve().parent.parent.parent

LOGS_DIR = ROOT_DIR / "logs"

# Backend defaults used when the settings panel has not provided a value.
DEFAULT_API_ENDPOINT = "https://api.anthropic.com/v1/messages"
DEFAULT_MODEL_NAME = "claude-3-5-sonnet-20241022"
ANTHROPIC_API_VERSION = "2023-06-01"

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2048

# A request still outstanding after this many seconds is failed by the dispatcher.
DEFAULT_REQUEST_TIMEOUT_SECONDS = 60.0

# Environment variables consulted by SettingsHolder.from_environment().
ENV_API_KEY = "HYPERBEAM_AI_API_KEY"
ENV_MODEL_NAME = "HYPERBEAM_AI_MODEL"
ENV_API_ENDPOINT = "HYPERBEAM_AI_ENDPOINT"

UNKNOWN_PROJECT_NAME = "Unknown"

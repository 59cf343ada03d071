from __future__ import annotations

import os
from dotenv import load_dotenv
from pydantic import BaseModel

# Load environment variables from .env (if present)
load_dotenv()

MAX_HISTORY = 10
MAX_SUGGESTIONS = 50
CACHE_TTL_MS = 7 * 24 * 60 * 60 * 1000  # 7 days

# Query that makes the upstream return every known sheet name, one per line
LIST_QUERY = ":list"

STORAGE_KEY_HISTORY = "cheatsh_history_md3"
STORAGE_KEY_THEME = "cheatsh_theme_md3"
STORAGE_KEY_COMMANDS = "cheatsh_commands"
STORAGE_KEY_COMMANDS_TS = "cheatsh_commands_ts"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    # Remote text provider the relay forwards to
    upstream_url: str = os.getenv("CHEATSH_UPSTREAM_URL", "https://cheat.sh")
    upstream_user_agent: str = os.getenv("CHEATSH_USER_AGENT", "curl/7.68.0")
    upstream_timeout: float = float(os.getenv("CHEATSH_UPSTREAM_TIMEOUT", "10"))

    # Relay route, and where the lookup client finds it
    api_endpoint: str = os.getenv("CHEATSH_API_ENDPOINT", "/api/cheat")
    relay_url: str = os.getenv("CHEATSH_RELAY_URL", "http://127.0.0.1:8787")

    # Value of Access-Control-Allow-Origin
    cors_origin: str = os.getenv("CORS_ORIGIN", "*")

    # Local key/value file used by the lookup client
    storage_path: str = os.getenv("CHEATSH_STORAGE", "~/.config/cheatsh/storage.json")

    log_level: str = os.getenv("CHEATSH_LOG_LEVEL", "INFO")

    # HTML rendering
    css_theme: str = os.getenv("CSS_THEME", "light")
    mobile_optimized: bool = _env_flag("MOBILE_OPTIMIZED", "true")
    html_font_size: str = os.getenv("HTML_FONT_SIZE", "15px")
    html_max_width: str = os.getenv("HTML_MAX_WIDTH", "960px")


settings = Settings()

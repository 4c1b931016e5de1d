import logging
from pathlib import Path

from dotenv import load_dotenv

_ENV_PATH = Path(".env").resolve()
# Some environments cannot commit dotfiles; support a visible fallback as well
_ENV_EXAMPLE_PATH = Path("env.example").resolve()

_logger = logging.getLogger(__name__)


def load_env() -> None:
    """Load environment variables from dotenv files.

    Precedence (highest → lowest):
    - .env (if present): overrides existing process env values
    - env.example: fills missing keys only (never overrides)
    """
    loaded = []
    if _ENV_PATH.exists():
        load_dotenv(_ENV_PATH, override=True)
        loaded.append(str(_ENV_PATH))
    if _ENV_EXAMPLE_PATH.exists():
        load_dotenv(_ENV_EXAMPLE_PATH, override=False)
        loaded.append(str(_ENV_EXAMPLE_PATH))
    if loaded:
        _logger.debug("env loaded", extra={"meta": {"files": loaded}})

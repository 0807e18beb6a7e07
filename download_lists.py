import os
import sys
import json
import logging
from typing import Dict, List, Mapping, Optional

from list_utils import download_files

# Constants
LISTS_DIR = "lists"
LIST_TYPES = ("allowlist", "blocklist")
LIST_ENV_VARS = {
    "allowlist": "ALLOWLIST_URLS",
    "blocklist": "BLOCKLIST_URLS"
}
WORKERS_ENV_VAR = "DOWNLOAD_WORKERS"
TIMEOUT_ENV_VAR = "DOWNLOAD_TIMEOUT"

# Set up logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


# Read URL sources for every list type
def load_list_sources(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    if environ is None:
        environ = os.environ
    return {list_type: environ.get(env_var, "") for list_type, env_var in LIST_ENV_VARS.items()}


def load_workers(environ: Optional[Mapping[str, str]] = None) -> int:
    if environ is None:
        environ = os.environ
    value = environ.get(WORKERS_ENV_VAR, "").strip()
    if not value:
        return 1
    try:
        return max(1, int(value))
    except ValueError:
        logger.warning("Ignoring invalid %s value: %s", WORKERS_ENV_VAR, value)
        return 1


def load_timeout(environ: Optional[Mapping[str, str]] = None) -> Optional[float]:
    if environ is None:
        environ = os.environ
    value = environ.get(TIMEOUT_ENV_VAR, "").strip()
    if not value:
        return None
    try:
        timeout = float(value)
    except ValueError:
        logger.warning("Ignoring invalid %s value: %s", TIMEOUT_ENV_VAR, value)
        return None
    return timeout if timeout > 0 else None


def output_path_for(list_type: str, lists_dir: str = LISTS_DIR) -> str:
    return os.path.join(lists_dir, f"{list_type}.txt")


# Dump the raw value and character codes of a source string
def log_debug_dump(env_var: str, value: str) -> None:
    logger.info("DEBUG - Raw environment variable %s: %s", env_var, json.dumps(value))
    chars = [f"{char}({ord(char)})" for char in value]
    logger.info("DEBUG - Character codes: %s", ", ".join(chars))


# Download one list type
def download_list(list_type: str, sources: Mapping[str, str], lists_dir: str = LISTS_DIR,
                  workers: int = 1, timeout: Optional[float] = None) -> bool:
    env_var = LIST_ENV_VARS[list_type]
    output_path = output_path_for(list_type, lists_dir)
    urls_string = sources.get(list_type) or ""

    logger.info("=== Downloading %s ===", list_type)

    if not urls_string.strip():
        logger.info("No URLs configured for %s (%s is empty)", list_type, env_var)
        return True

    logger.info("Environment variable %s: %s", env_var, urls_string)

    try:
        download_files(urls_string, output_path, workers=workers, timeout=timeout)
    except Exception:
        logger.exception("An error occurred while processing %s", os.path.basename(output_path))
        log_debug_dump(env_var, urls_string)
        return False

    logger.info("Successfully downloaded %s", list_type)
    return True


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        logger.error("Usage: python download_lists.py <allowlist|blocklist>")
        return 1

    list_type = argv[0]
    if list_type not in LIST_TYPES:
        logger.error('List type must be either "allowlist" or "blocklist"')
        return 1

    try:
        sources = load_list_sources()
        ok = download_list(list_type, sources, lists_dir=LISTS_DIR,
                           workers=load_workers(), timeout=load_timeout())
    except Exception:
        logger.exception("Fatal error")
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())

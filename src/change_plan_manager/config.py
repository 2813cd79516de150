import os

# --- Env parsing helpers ---


def _env_bool(name: str, default: bool = False) -> bool:
    """True for 1/true/yes/on (any case), False for anything else set."""
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float = 1.0) -> float:
    """Float value of ``name``; ``default`` when unset or unparsable."""
    val = os.getenv(name)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        return default


APP_NAME = "change-plan-manager"

# --- Core Paths ---
WORKSPACE_ROOT = os.getcwd()
PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))

# --- Storage ---
# Directory holding the plans file. Empty means "pick the first writable
# candidate" (see change_plan_manager.io.paths).
STORAGE_PATH = os.getenv("STORAGE_PATH", "").strip()
STORAGE_FILE_NAME = os.getenv("STORAGE_FILE_NAME", "change_plans.yaml")

# --- Logging Configuration ---
LOG_DIR = os.getenv("LOG_DIR", os.path.join(WORKSPACE_ROOT, "logs"))
LOG_FILE_PATH = os.path.join(LOG_DIR, "change_plan_manager.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOG = _env_bool("CHANGE_PLAN_ENABLE_FILE_LOG")

# --- Scheduling Guardrails ---
# Reject dependency updates that close a multi-step cycle
DETECT_DEPENDENCY_CYCLES = _env_bool("CHANGE_PLAN_DETECT_CYCLES", True)

# --- Transport ---
# 'stdio' (default) or 'http' (Streamable HTTP served by uvicorn)
TRANSPORT = os.getenv("CHANGE_PLAN_TRANSPORT", "stdio").strip().lower()

# --- Uvicorn Configuration ---
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "3000"))
RELOAD = _env_bool("CHANGE_PLAN_RELOAD")
RELOAD_DIRS = os.getenv("RELOAD_DIRS", "src").split(",")
RELOAD_INCLUDES = os.getenv("RELOAD_INCLUDE", "*.py").split(",")
RELOAD_EXCLUDES = os.getenv("RELOAD_EXCLUDE", "logs/*").split(",")
TIMEOUT_GRACEFUL_SHUTDOWN = int(os.getenv("TIMEOUT_GRACEFUL_SHUTDOWN", "3"))
TIMEOUT_KEEP_ALIVE = int(os.getenv("TIMEOUT_KEEP_ALIVE", "5"))

# --- Docs / Agent Guides ---
USAGE_GUIDE_REL_PATH = os.getenv(
    "USAGE_GUIDE_REL_PATH", os.path.join("docs", "usage_guide.md")
)

# --- Telemetry ---
# Lightweight, opt-in counters/timers for tool calls
TELEMETRY_ENABLED = _env_bool("CHANGE_PLAN_TELEMETRY_ENABLED")
TELEMETRY_SAMPLE_RATE = _env_float("CHANGE_PLAN_TELEMETRY_SAMPLE_RATE", 1.0)

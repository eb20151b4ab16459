from dotenv import load_dotenv
import os


load_dotenv()


def _split_list(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    # Grid'5000 Kwollect API
    KWOLLECT_BASE_URL = os.getenv("KWOLLECT_BASE_URL", "https://api.grid5000.fr/stable")
    KWOLLECT_SITE = os.getenv("KWOLLECT_SITE", "lyon")
    KWOLLECT_HOSTNAMES = _split_list(os.getenv("KWOLLECT_HOSTNAMES", "taurus-7"))
    KWOLLECT_METRICS = _split_list(os.getenv("KWOLLECT_METRICS", "wattmetre_power_watt"))
    # Metrics registered as unsigned integers; all others are floats
    KWOLLECT_UINT_METRICS = _split_list(os.getenv("KWOLLECT_UINT_METRICS", ""))

    # Placeholders: override through the environment
    KWOLLECT_LOGIN = os.getenv("KWOLLECT_LOGIN", "login")
    KWOLLECT_PASSWORD = os.getenv("KWOLLECT_PASSWORD", "password")

    KWOLLECT_TIMEOUT = float(os.getenv("KWOLLECT_TIMEOUT", 30))
    KWOLLECT_TRIGGER_ACK_TIMEOUT = float(os.getenv("KWOLLECT_TRIGGER_ACK_TIMEOUT", 1.0))
    KWOLLECT_POLL_INTERVAL = int(os.getenv("KWOLLECT_POLL_INTERVAL", 60))
    KWOLLECT_USE_POLL_TIMESTAMP = _as_bool(os.getenv("KWOLLECT_USE_POLL_TIMESTAMP", "false"))
    KWOLLECT_SINK_CAPACITY = int(os.getenv("KWOLLECT_SINK_CAPACITY", 1000))

    API_HOST = os.getenv("API_HOST", "0.0.0.0")
    API_PORT = int(os.getenv("API_PORT", 8000))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()

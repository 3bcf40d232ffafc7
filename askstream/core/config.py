# centralized configuration loader
# runs load_dotenv() to read .env
# provider credentials and per-provider overrides are NOT frozen here; the
# registry resolves them from the environment mapping at request time

import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return float(raw)


# Provider used when a request does not name one
PROVIDER = os.getenv("ASK_PROVIDER", "anthropic")

# Transport caps; an unset read timeout means long generations are never cut off
TIMEOUT_SECONDS = _optional_float("ASK_TIMEOUT_SECONDS")
CONNECT_TIMEOUT_SECONDS = float(os.getenv("ASK_CONNECT_TIMEOUT_SECONDS", "10"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

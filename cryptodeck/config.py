# config.py
from functools import lru_cache
from pathlib import Path
from dotenv import load_dotenv
import os

load_dotenv(Path(__file__).parent.parent / ".env")

@lru_cache
def settings():
    return {
        "API_URL": os.getenv("API_URL", "http://localhost:3000/api").rstrip("/"),
        "REQUEST_TIMEOUT": float(os.getenv("REQUEST_TIMEOUT", "5")),
        # Portfolio refresh period; prices move faster and refresh on their own clock
        "REFRESH_SECONDS": int(os.getenv("REFRESH_SECONDS", "60")),
        "PRICE_REFRESH_SECONDS": int(os.getenv("PRICE_REFRESH_SECONDS", "20")),
        "QUOTE_ASSET": os.getenv("QUOTE_ASSET", "USDT"),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO"),
        "APP_TITLE": os.getenv("APP_TITLE", "cryptodeck"),
    }

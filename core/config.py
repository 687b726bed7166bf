import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    """Application settings and configuration."""
    FIREBASE_SERVICE_ACCOUNT_KEY_JSON = os.getenv("FIREBASE_SERVICE_ACCOUNT_KEY_JSON")
    FIREBASE_DATABASE_URL = os.getenv("FIREBASE_DATABASE_URL")

    # "firebase" stores lists in the Realtime Database, "memory" keeps them in-process
    PACKING_STORAGE_BACKEND = os.getenv("PACKING_STORAGE_BACKEND", "firebase")
    # All of a user's lists live under <PACKING_STORAGE_KEY>/<uid>
    PACKING_STORAGE_KEY = os.getenv("PACKING_STORAGE_KEY", "tent-lantern-packing")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Comma separated list of origins allowed to call the API
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS",
            "http://localhost,http://localhost:8081,http://127.0.0.1:8081,http://localhost:8000",
        ).split(",")
        if origin.strip()
    ]

settings = Settings()

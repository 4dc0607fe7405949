import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class Config:
    BASE_DIR = Path(__file__).resolve().parent.parent
    STORAGE_DIR = Path(os.getenv("DOCSTORE_STORAGE_DIR", "./uploaded_files"))
    FORMATS_DIR = Path(os.getenv("DOCSTORE_FORMATS_DIR", "./formats"))
    # created under STORAGE_DIR at startup
    STORAGE_SUBDIRS = ("News", "Market", "Store", "Account")
    CORS_ORIGINS = _csv(os.getenv("DOCSTORE_CORS_ORIGINS", "http://localhost:3000"))
    MAX_CONTENT_LENGTH = 1024 * 1024
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class DevConfig(Config):
    DEBUG = True


class ProdConfig(Config):
    DEBUG = False


class TestConfig(Config):
    TESTING = True

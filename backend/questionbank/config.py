"""Application settings and validation."""

import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    DB_HOST: str
    DB_USER: str
    DB_PASSWORD: str
    DB_NAME: str
    DB_PORT: int
    DATABASE_URL: str
    PORT: int
    LOG_LEVEL: str
    ALLOW_DEV_CORS: bool
    CREATE_TABLES: bool
    PIN_HASH_ROUNDS: int

    def __init__(self):
        self.DB_HOST = os.getenv("DB_HOST", "localhost")
        self.DB_USER = os.getenv("DB_USER", "root")
        self.DB_PASSWORD = os.getenv("DB_PASSWORD", "password")
        self.DB_NAME = os.getenv("DB_NAME", "TeckStack")
        self.DB_PORT = self._int_env("DB_PORT", 3306)
        self.DATABASE_URL = os.getenv("DATABASE_URL") or (
            f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )
        self.PORT = self._int_env("PORT", 5000)
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.CREATE_TABLES = os.getenv("CREATE_TABLES", "false").lower() == "true"
        self.PIN_HASH_ROUNDS = self._int_env("PIN_HASH_ROUNDS", 29000)
        self._validate()

    @staticmethod
    def _int_env(name: str, default: int) -> int:
        raw = os.getenv(name, str(default))
        try:
            return int(raw)
        except ValueError:
            raise RuntimeError(f"{name} must be an integer, got {raw!r}")

    def _validate(self):
        for name in ("DB_PORT", "PORT"):
            value = getattr(self, name)
            if not 0 < value < 65536:
                raise RuntimeError(f"{name} must be a valid TCP port, got {value}")
        if self.PIN_HASH_ROUNDS < 1000:
            raise RuntimeError("PIN_HASH_ROUNDS must be at least 1000")


settings = Settings()

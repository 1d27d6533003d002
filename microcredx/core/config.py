import os
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


class Settings:
    PROJECT_NAME: str = "MicroCredX Loan Marketplace"
    MONGODB_URI: str = os.getenv("MONGODB_URI")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME", "microcredx")
    CLIENT_URL: str = os.getenv("CLIENT_URL", "*")
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_AUDIENCE: Optional[str] = os.getenv("JWT_AUDIENCE")
    JWT_ISSUER: Optional[str] = os.getenv("JWT_ISSUER")
    # None means /home-loans returns every featured product
    HOME_LOANS_LIMIT: Optional[int] = _optional_int(os.getenv("HOME_LOANS_LIMIT"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))


settings = Settings()

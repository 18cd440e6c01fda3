import os
from urllib.parse import quote_plus
from dotenv import load_dotenv

load_dotenv()


def _build_database_url():
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    user = os.getenv("DB_USER", "postgres")
    password = quote_plus(os.getenv("DB_PASSWORD", ""))
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT", "5432")
    name = os.getenv("DB_NAME", "closerdesk")
    return f"postgresql://{user}:{password}@{host}:{port}/{name}"


class Settings:
    # DATABASE
    DATABASE_URL = _build_database_url()

    # AUTH (tokens are minted by the login service, we only verify them)
    JWT_SECRET = os.getenv("JWT_SECRET") or os.getenv("NEXTAUTH_SECRET")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

    # CORS
    CORS_ORIGINS = [
        o.strip()
        for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
        if o.strip()
    ]

    # SCHEDULING
    # 0 disables the periodic auto-assign job
    AUTO_ASSIGN_INTERVAL_MINUTES = int(os.getenv("AUTO_ASSIGN_INTERVAL_MINUTES", "0"))

    # DEFAULTS
    DEFAULT_APPOINTMENT_DURATION = int(os.getenv("DEFAULT_APPOINTMENT_DURATION", "30"))
    DEFAULT_COMMISSION_RATE = os.getenv("DEFAULT_COMMISSION_RATE", "0.10")


settings = Settings()

from typing import Optional
from sqlalchemy.engine import URL


def _normalize_db_url(url: Optional[str]) -> Optional[str]:
    # Hosted providers often hand out "postgres://..." while SQLAlchemy async needs "postgresql+asyncpg://..."
    if not url:
        return None
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def build_database_url(settings) -> str:
    """DATABASE_URL wins; otherwise assemble one from the discrete DB_* settings."""
    url = _normalize_db_url(settings.DATABASE_URL)
    if url:
        return url
    return URL.create(
        "postgresql+asyncpg",
        username=settings.DB_USER,
        password=settings.DB_PASSWORD,
        host=settings.DB_HOST,
        port=settings.DB_PORT,
        database=settings.DB_NAME,
    ).render_as_string(hide_password=False)


def connect_args_for(url: str, settings) -> dict:
    # TLS towards managed postgres outside dev, only for the single-url form
    if url.startswith("postgresql+asyncpg") and settings.DATABASE_URL and not settings.is_dev:
        return {"ssl": "require"}
    return {}

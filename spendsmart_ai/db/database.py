from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from functools import lru_cache
from typing import Optional
import logging
from urllib.parse import quote_plus

from spendsmart_ai.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_connection_string(config: Settings) -> str:
    if config.DATABASE_URL:
        return config.DATABASE_URL

    if config.DB_USER and config.DB_PASSWORD:
        # SQL Authentication (Cloud)
        driver = config.DB_DRIVER.replace(' ', '+')
        password = quote_plus(config.DB_PASSWORD)
        return (
            f"mssql+aioodbc://{config.DB_USER}:{password}@{config.DB_SERVER}/{config.DB_NAME}"
            f"?driver={driver}"
            f"&TrustServerCertificate={'yes' if config.DB_TRUST_SERVER_CERTIFICATE else 'no'}"
        )

    # Windows Authentication (Local)
    return (
        f"mssql+aioodbc://"
        f"?driver={config.DB_DRIVER.replace(' ', '+')}"
        f"&server={config.DB_SERVER}"
        f"&database={config.DB_NAME}"
        f"&trusted_connection={'yes' if config.DB_TRUSTED_CONNECTION else 'no'}"
        f"&TrustServerCertificate={'yes' if config.DB_TRUST_SERVER_CERTIFICATE else 'no'}"
    )


@lru_cache()
def get_engine() -> AsyncEngine:
    config = get_settings()
    url = build_connection_string(config)
    logger.info(f"Creating database engine for dialect {url.split(':', 1)[0]}")
    return create_async_engine(
        url,
        echo=config.DEBUG,
        poolclass=NullPool,
        future=True,
    )


def get_session_factory(engine: Optional[AsyncEngine] = None) -> async_sessionmaker:
    return async_sessionmaker(
        engine or get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


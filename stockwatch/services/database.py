from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from stockwatch.models.watched_stock import Base
from stockwatch.utils.logger import logger


def create_session_factory(database_url: str, echo: bool = False) -> sessionmaker:
    """Create the engine, make sure the tables exist and return a session factory."""
    engine_kwargs = {"echo": echo}
    if database_url.startswith("sqlite"):
        # Route handlers run the store in worker threads (asyncio.to_thread).
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            engine_kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **engine_kwargs)
    Base.metadata.create_all(engine)
    logger.info(f"✅ Database ready at {engine.url.render_as_string(hide_password=True)}")
    return sessionmaker(bind=engine, expire_on_commit=False)

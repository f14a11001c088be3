from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from settleup.core.config import settings

Base = declarative_base()

def make_engine(url: str, echo: bool = False):
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True
    )

def make_sessionmaker(bind):
    return sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False
    )

engine = make_engine(settings.DATABASE_URL, settings.DATABASE_ECHO)

async_session = make_sessionmaker(engine)

async def init_models(bind=None):
    # registers every table on Base.metadata before create_all
    import settleup.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

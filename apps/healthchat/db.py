from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy import text
from apps.healthchat.config import get_healthchat_settings

# Import models so SQLAlchemy can discover them
from apps.healthchat.models import ChatSession

settings = get_healthchat_settings()


def build_engine(database_url: str, **kwargs):
    """Create the async engine; asyncpg gets its server settings only on PostgreSQL."""
    options = {
        "echo": settings.DB_ECHO,
        "future": True,
        "pool_pre_ping": True,
    }
    if database_url.startswith("postgresql"):
        options["pool_recycle"] = 300
        options["connect_args"] = {
            "server_settings": {
                "application_name": "arogya_healthchat"
            },
            "ssl": False
        }
    options.update(kwargs)
    return create_async_engine(database_url, **options)


engine = build_engine(settings.DATABASE_URL)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

async def init_healthchat_db(bind=None):
    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

async def ping_healthchat_db(session: AsyncSession) -> bool:
    await session.execute(text("SELECT 1"))
    return True

async def get_healthchat_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()

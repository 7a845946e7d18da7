from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from blog_service.config import settings
from blog_service.middleware import install_query_counter

# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.SQL_ECHO,
    pool_pre_ping=True,
)

# Register the per-request SQL query counter on the production engine.
install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


_CONFLICT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


async def get_db():
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    Session factory for work that outlives the request session, such as
    background tasks scheduled after the response.  Overridden in tests.
    """
    return async_session


async def insert_or_ignore(
    db: AsyncSession, model: type[Base], values: dict, conflict_columns: list[str]
) -> bool:
    """
    Insert one *model* row unless it collides with the unique constraint on
    *conflict_columns*.  Returns ``True`` when a row was written.

    PostgreSQL and SQLite use ``ON CONFLICT DO NOTHING``; other dialects
    insert inside a SAVEPOINT and treat ``IntegrityError`` as a collision.
    """
    insert = _CONFLICT_INSERTS.get(db.get_bind().dialect.name)
    if insert is not None:
        stmt = insert(model).values(**values).on_conflict_do_nothing(
            index_elements=conflict_columns
        )
        result = await db.execute(stmt)
        return result.rowcount == 1

    try:
        async with db.begin_nested():
            db.add(model(**values))
    except IntegrityError:
        return False
    return True

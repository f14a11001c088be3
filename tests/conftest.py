import pytest

from settleup.core.context import UserContext
from settleup.db.session import init_models, make_engine, make_sessionmaker
from settleup.services.group_services import add_member, create_group


@pytest.fixture
async def db(tmp_path):
    """Session bound to a throwaway SQLite file with all tables created."""
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'settleup.db'}")
    await init_models(engine)

    session_factory = make_sessionmaker(engine)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def alice():
    return UserContext(user_id="alice", name="Alice")


@pytest.fixture
def bob():
    return UserContext(user_id="bob", name="Bob")


@pytest.fixture
def carol():
    return UserContext(user_id="carol", name="Carol")


@pytest.fixture
def outsider():
    return UserContext(user_id="mallory", name="Mallory")


@pytest.fixture
async def trip(db, alice, bob, carol):
    """Group created by Alice with Bob and Carol added, in that order."""
    group = await create_group(db, alice, "Lisbon trip")
    await add_member(db, alice, group.id, bob.user_id, bob.name)
    await add_member(db, alice, group.id, carol.user_id, carol.name)
    return group

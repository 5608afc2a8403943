import pytest

from eventgate.auth.session import InMemorySessionStore
from eventgate.auth.users import UserStore
from eventgate.errors import DuplicateUsername, InvalidCredentials, NotFound
from eventgate.infra.db import init_db, make_engine, make_session_factory
from eventgate.services import auth_service


@pytest.mark.asyncio
async def test_register_then_login(settings):
    engine = make_engine(settings.database_url)
    await init_db(engine)
    store = UserStore(make_session_factory(engine))
    sessions = InMemorySessionStore(60)
    try:
        user = await auth_service.register(store, "alice", "secret123")
        assert user.password_hash != "secret123"

        with pytest.raises(DuplicateUsername):
            await auth_service.register(store, "alice", "again")

        with pytest.raises(InvalidCredentials):
            await auth_service.login(store, sessions, "alice", "wrongpass")
        assert len(sessions) == 0

        with pytest.raises(NotFound):
            await auth_service.login(store, sessions, "bob", "anything")

        token = await auth_service.login(store, sessions, "alice", "secret123")
        assert sessions.get(token).user.username == "alice"

        auth_service.logout(sessions, token)
        assert sessions.get(token) is None
    finally:
        await engine.dispose()


class _FailingSessions:
    def destroy(self, token):
        raise OSError("session backend gone")


def test_logout_never_raises():
    auth_service.logout(_FailingSessions(), "tok")
    auth_service.logout(_FailingSessions(), "")

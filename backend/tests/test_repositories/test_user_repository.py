"""Tests for UserRepository."""

from repositories.user_repository import UserRepository


class TestUserRepository:
    def test_get_by_username(self, db_session, test_user):
        repo = UserRepository(db_session)
        assert repo.get_by_username("testuser").id == test_user.id
        assert repo.get_by_username("missing") is None

    def test_get_by_ids(self, db_session, test_user, other_user):
        users = UserRepository(db_session).get_by_ids([test_user.id, other_user.id, 999])
        assert set(users) == {test_user.id, other_user.id}
        assert UserRepository(db_session).get_by_ids([]) == {}

"""Tests for household.utils.recent_users — login shortcut list."""

from household.data.models import RecentUser, UserProfile
from household.utils.recent_users import MAX_RECENT_USERS, RecentUsersStore, build_recent_users


def _profile(n):
    return UserProfile(id=f"u{n}", name=f"User {n}", email=f"user{n}@example.com")


class TestBuildRecentUsers:
    def test_newest_first_without_duplicates(self):
        users = []
        for n in (1, 2, 1):
            users = build_recent_users(users, _profile(n))
        assert [u.email for u in users] == ["user1@example.com", "user2@example.com"]

    def test_capped(self):
        users = []
        for n in range(MAX_RECENT_USERS + 2):
            users = build_recent_users(users, _profile(n))
        assert len(users) == MAX_RECENT_USERS
        assert users[0].email == f"user{MAX_RECENT_USERS + 1}@example.com"


class TestRecentUsersStore:
    def test_missing_file_is_empty(self, tmp_path):
        assert RecentUsersStore(tmp_path / "none.json").load() == []

    def test_save_and_load(self, tmp_path):
        store = RecentUsersStore(tmp_path / "nested" / "recent.json")
        store.save([RecentUser(email="a@x", name="Ana", avatar="A", color="#f00")])
        assert store.load() == [RecentUser(email="a@x", name="Ana", avatar="A", color="#f00")]

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "recent.json"
        path.write_text("{not json", encoding="utf-8")
        assert RecentUsersStore(path).load() == []

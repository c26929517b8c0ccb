"""
Integration tests for the SQL-backed user store, release notes service and
workspace cloner against a temporary SQLite database.
"""

import asyncio

import pytest

from authflow.models import User
from authflow.user_data import UserDataService
from authflow.workspace_cloner import ExampleWorkspaceCloner


class TestUserDAO:
    async def test_save_and_get(self, user_store):
        await user_store.save_user(User(id="u1", email="u1@example.com", invite_token="xyz"))

        user = await user_store.get_user("u1")

        assert user == User(id="u1", email="u1@example.com", invite_token="xyz")
        assert await user_store.get_user("missing") is None

    async def test_release_notes_version_is_idempotent(self, user_store):
        await user_store.save_user(User(id="u1"))

        assert await user_store.set_release_notes_version("u1", "2") is True
        assert await user_store.set_release_notes_version("u1", "2") is False
        assert (await user_store.get_user("u1")).release_notes_viewed_version == "2"


class TestUserDataServiceSql:
    async def test_ensure_viewed(self, user_store):
        await user_store.save_user(User(id="u1", release_notes_viewed_version="1"))
        service = UserDataService(user_store, "2")
        user = await user_store.get_user("u1")

        await service.ensure_viewed_current_version_release_notes(user)
        await service.ensure_viewed_current_version_release_notes(user)

        assert (await user_store.get_user("u1")).release_notes_viewed_version == "2"


class TestExampleWorkspaceCloner:
    async def test_provisions_once(self, user_store):
        """Test that repeated cloning keeps the first workspace."""
        await user_store.save_user(User(id="u1"))
        cloner = ExampleWorkspaceCloner(user_store)

        first = await cloner.clone_examples_workspace(await user_store.get_user("u1"))
        # A stale copy of the user still believes it has no workspace
        stale = User(id="u1")
        second = await cloner.clone_examples_workspace(stale)

        assert first == second
        assert stale.example_workspace_id == first
        assert (await user_store.get_user("u1")).example_workspace_id == first

    async def test_concurrent_first_logins(self, user_store):
        await user_store.save_user(User(id="u1"))
        cloner = ExampleWorkspaceCloner(user_store)
        users = [User(id="u1") for _ in range(5)]

        results = await asyncio.gather(*(cloner.clone_examples_workspace(u) for u in users))

        assert len(set(results)) == 1
        assert (await user_store.get_user("u1")).example_workspace_id == results[0]

    async def test_unknown_user(self, user_store):
        with pytest.raises(LookupError):
            await ExampleWorkspaceCloner(user_store).clone_examples_workspace(User(id="ghost"))

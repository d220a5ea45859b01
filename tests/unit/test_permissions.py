"""
Unit tests for app/core/permissions.py

Squad roles and the two authorization rules, without database.
"""

from types import SimpleNamespace

import pytest

from app.core.permissions import (
    PRIVILEGED_ROLES,
    SquadRole,
    is_squad_creator,
    sanitize_join_role,
)


class TestSanitizeJoinRole:
    """Test the role stored for self-service joins."""

    @pytest.mark.parametrize("requested", ["creator", "moderator"])
    def test_privileged_roles_downgraded(self, requested):
        assert sanitize_join_role(requested) == SquadRole.MEMBER

    @pytest.mark.parametrize("requested", ["frontend", "backend", "designer", "qa", "docs", "contributor", "member"])
    def test_specialties_kept(self, requested):
        assert sanitize_join_role(requested).value == requested

    @pytest.mark.parametrize("requested", [None, "", "owner", "CREATOR"])
    def test_missing_or_unknown_become_member(self, requested):
        assert sanitize_join_role(requested) == SquadRole.MEMBER

    def test_privileged_set(self):
        assert PRIVILEGED_ROLES == {SquadRole.CREATOR, SquadRole.MODERATOR}


class TestIsSquadCreator:
    """Test creator check used by update/delete."""

    def test_creator(self):
        squad = SimpleNamespace(created_by=3)
        assert is_squad_creator(squad, 3) is True

    def test_other_user(self):
        squad = SimpleNamespace(created_by=3)
        assert is_squad_creator(squad, 4) is False

    def test_anonymous(self):
        squad = SimpleNamespace(created_by=3)
        assert is_squad_creator(squad, None) is False

    def test_missing_squad(self):
        assert is_squad_creator(None, 3) is False

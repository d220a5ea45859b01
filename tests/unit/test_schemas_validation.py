"""
Unit tests for Pydantic schemas validation.

Tests schema validation without database.
"""

import pytest
from pydantic import ValidationError

from app.schemas.repository import RepositoryImport
from app.schemas.squad import SquadCreate, SquadUpdate
from app.schemas.squad_member import SquadJoin


class TestRepositorySchemas:
    """Test repository import body."""

    def test_import_reads_camel_case_field(self):
        body = RepositoryImport.model_validate({"repoFullName": "octocat/Hello-World"})
        assert body.repo_full_name == "octocat/Hello-World"

    def test_import_missing_name_is_none(self):
        assert RepositoryImport.model_validate({}).repo_full_name is None


class TestSquadSchemas:
    """Test squad create/update bodies."""

    def test_create_valid(self):
        squad = SquadCreate(repo_id=1, name="Core", description="Fix the build")
        assert squad.repo_id == 1
        assert squad.name == "Core"

    def test_create_requires_repo_id(self):
        with pytest.raises(ValidationError) as exc_info:
            SquadCreate(name="Core")

        errors = exc_info.value.errors()
        assert any(error["loc"] == ("repo_id",) for error in errors)

    def test_create_rejects_non_positive_repo_id(self):
        with pytest.raises(ValidationError):
            SquadCreate(repo_id=0, name="Core")

    def test_update_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            SquadUpdate(name="")

    def test_update_partial(self):
        update = SquadUpdate(description="New focus")
        assert update.model_dump(exclude_unset=True) == {"description": "New focus"}


class TestSquadJoinSchema:

    def test_role_optional(self):
        assert SquadJoin().role is None

    def test_any_short_role_accepted(self):
        # Downgrading privileged roles is the service's job
        assert SquadJoin(role="creator").role == "creator"

"""
Tests for the project CQRS APIs against an in-memory DynamoDB.
"""

import pytest

from portfolio_store import ProjectCreate, ProjectUpdate
from portfolio_store.core import keys
from portfolio_store.exceptions import AlreadyExistsError, ItemNotFoundError, ValidationError


class TestCreateProject:
    """Test project creation."""

    def test_slug_from_title(self, projects_write_api, projects_read_api, sample_project_data):
        project = projects_write_api.create_project(sample_project_data)

        assert project.project_id == "mountain-series"
        assert project.status == "draft"
        assert project.image_count == 0
        assert project.published_at is None

        stored = projects_read_api.get_by_id("mountain-series")
        assert stored.project == project
        assert stored.images == []

    def test_explicit_id(self, projects_write_api):
        project = projects_write_api.create_project(ProjectCreate(
            project_id="alps-2024", title="Mountain Series", category="landscape"
        ))

        assert project.project_id == "alps-2024"

    def test_ref_row_written(self, projects_write_api, portfolio_table, sample_project_data):
        project = projects_write_api.create_project(sample_project_data)

        ref = portfolio_table.get_item(Key=keys.project_ref_keys(project.project_id))['Item']

        assert ref['EntityType'] == 'ProjectRef'
        assert ref['ProjectSortKey'] == project.primary_key()['SK']

    def test_duplicate_slug(self, projects_write_api, sample_project_data):
        projects_write_api.create_project(sample_project_data)

        with pytest.raises(AlreadyExistsError) as exc_info:
            projects_write_api.create_project({"title": "Mountain Series", "category": "other"})

        assert exc_info.value.resource_id == "mountain-series"

    def test_missing_required_field(self, projects_write_api):
        with pytest.raises(ValidationError) as exc_info:
            projects_write_api.create_project({"title": "No Category"})

        assert any(err['field'] == 'category' for err in exc_info.value.errors)

    def test_server_fields_not_accepted(self, projects_write_api, sample_project_data):
        with pytest.raises(ValidationError):
            projects_write_api.create_project({**sample_project_data, "image_count": 5})

    def test_created_published(self, projects_write_api):
        project = projects_write_api.create_project({"title": "Live", "category": "street", "status": "published"})

        assert project.published_at == project.created_at


class TestProjectQueries:
    """Test project listings."""

    @pytest.fixture
    def seeded(self, projects_write_api):
        projects_write_api.create_project({"title": "Draft One", "category": "landscape"})
        projects_write_api.create_project({"title": "Live One", "category": "landscape", "status": "published"})
        projects_write_api.create_project({"title": "Live Two", "category": "street", "status": "published"})
        projects_write_api.create_project({
            "title": "Hidden", "category": "landscape", "status": "published", "is_visible": False
        })

    def test_list_published(self, projects_read_api, projects_write_api, seeded):
        projects_write_api.update_project("live-one", {"description": "touched last"})

        published = projects_read_api.list_published()

        assert [p.project_id for p in published] == ["live-one", "live-two"]

    def test_list_published_empty(self, projects_read_api, portfolio_table):
        assert projects_read_api.list_published() == []

    def test_list_all(self, projects_read_api, seeded):
        ids = {p.project_id for p in projects_read_api.list_all()}

        assert ids == {"draft-one", "live-one", "live-two", "hidden"}

    def test_list_by_category(self, projects_read_api, seeded):
        landscape = projects_read_api.list_by_category("landscape")

        assert [p.project_id for p in landscape] == ["live-one"]
        assert projects_read_api.list_by_category("portrait") == []

    def test_get_by_id_missing(self, projects_read_api, portfolio_table):
        with pytest.raises(ItemNotFoundError):
            projects_read_api.get_by_id("nope")


class TestUpdateProject:
    """Test partial updates."""

    def test_update_fields(self, projects_write_api, projects_read_api, sample_project_data):
        created = projects_write_api.create_project(sample_project_data)

        updated = projects_write_api.update_project("mountain-series", ProjectUpdate(title="Alpine Series"))

        assert updated.title == "Alpine Series"
        assert updated.description == created.description
        assert updated.tags == created.tags
        assert updated.updated_at > created.updated_at
        assert projects_read_api.get_project("mountain-series").title == "Alpine Series"

    def test_publish_moves_into_index(self, projects_write_api, projects_read_api, sample_project_data):
        projects_write_api.create_project(sample_project_data)
        assert projects_read_api.list_published() == []

        updated = projects_write_api.update_project("mountain-series", {"status": "published"})

        assert updated.published_at is not None
        assert [p.project_id for p in projects_read_api.list_published()] == ["mountain-series"]

    def test_category_change_moves_index(self, projects_write_api, projects_read_api):
        projects_write_api.create_project({"title": "Move Me", "category": "landscape", "status": "published"})

        projects_write_api.update_project("move-me", {"category": "street"})

        assert projects_read_api.list_by_category("landscape") == []
        assert [p.project_id for p in projects_read_api.list_by_category("street")] == ["move-me"]

    def test_null_resets_default(self, projects_write_api, sample_project_data):
        projects_write_api.create_project(sample_project_data)

        updated = projects_write_api.update_project("mountain-series", {"location": None})

        assert updated.location == ""

    def test_null_on_required_rejected(self, projects_write_api, sample_project_data):
        projects_write_api.create_project(sample_project_data)

        with pytest.raises(ValidationError):
            projects_write_api.update_project("mountain-series", {"title": None})

    def test_image_count_not_updatable(self, projects_write_api, sample_project_data):
        projects_write_api.create_project(sample_project_data)

        with pytest.raises(ValidationError):
            projects_write_api.update_project("mountain-series", {"image_count": 10})

    def test_update_missing(self, projects_write_api, portfolio_table):
        with pytest.raises(ItemNotFoundError):
            projects_write_api.update_project("nope", {"title": "x"})


class TestDeleteProject:
    """Test cascading delete."""

    def test_delete_empty_project(self, projects_write_api, projects_read_api, portfolio_table, sample_project_data):
        projects_write_api.create_project(sample_project_data)

        assert projects_write_api.delete_project("mountain-series") == 1

        with pytest.raises(ItemNotFoundError):
            projects_read_api.get_by_id("mountain-series")
        assert 'Item' not in portfolio_table.get_item(Key=keys.project_ref_keys("mountain-series"))

    def test_delete_twice(self, projects_write_api, sample_project_data):
        projects_write_api.create_project(sample_project_data)
        projects_write_api.delete_project("mountain-series")

        with pytest.raises(ItemNotFoundError):
            projects_write_api.delete_project("mountain-series")

    def test_delete_leaves_siblings(self, projects_write_api, projects_read_api):
        projects_write_api.create_project({"title": "Keep", "category": "c"})
        projects_write_api.create_project({"title": "Drop", "category": "c"})

        projects_write_api.delete_project("drop")

        assert [p.project_id for p in projects_read_api.list_all()] == ["keep"]

    def test_slug_reusable_after_delete(self, projects_write_api, sample_project_data):
        projects_write_api.create_project(sample_project_data)
        projects_write_api.delete_project("mountain-series")

        assert projects_write_api.create_project(sample_project_data).project_id == "mountain-series"

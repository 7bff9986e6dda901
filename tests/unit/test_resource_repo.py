from pathlib import Path

import pytest

from ailibrary.core.errors import DatastoreError, ResourceNotFoundError
from ailibrary.domain.models.resource import Resource
from ailibrary.infrastructure.db.repos.resource_repo import ResourceRepo
from ailibrary.infrastructure.db.sqlite import initialize_schema


def _repo(tmp_path: Path) -> ResourceRepo:
    db_path = tmp_path / "data" / "library.db"
    initialize_schema(db_path)
    return ResourceRepo(db_path)


def test_insert_many_assigns_ids_and_round_trips_fields(tmp_path: Path) -> None:
    repo = _repo(tmp_path)

    inserted = repo.insert_many(
        [
            Resource(title="Intro", link="https://example.com/1", quality_rating=5, status_priority="Core"),
            Resource(title="Second", link="https://example.com/2", content_type=None),
        ]
    )

    assert [r.id for r in inserted] == [1, 2]
    assert inserted[0].quality_rating == 5
    assert inserted[1].content_type is None
    assert [r.title for r in repo.list_all()] == ["Intro", "Second"]
    assert [r.link for r in repo.list_all() if r.id == 2] == ["https://example.com/2"]


def test_insert_many_is_atomic_per_call(tmp_path: Path) -> None:
    repo = _repo(tmp_path)

    with pytest.raises(DatastoreError):
        repo.insert_many(
            [
                Resource(title="Valid", link="https://example.com/ok"),
                Resource(title="Bad rating", link="https://example.com/bad", quality_rating=9),
            ]
        )

    assert repo.list_all() == []


def test_update_changes_only_supplied_columns(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    [created] = repo.insert_many([Resource(title="Draft", link="https://example.com/d", your_notes="keep")])

    updated = repo.update(created.id, {"title": "Final", "quality_rating": 4, "unknown": "ignored"})

    assert updated.title == "Final"
    assert updated.quality_rating == 4
    assert updated.your_notes == "keep"


def test_update_and_delete_missing_ids_raise(tmp_path: Path) -> None:
    repo = _repo(tmp_path)

    with pytest.raises(ResourceNotFoundError):
        repo.update(42, {"title": "Nope"})
    with pytest.raises(ResourceNotFoundError):
        repo.update(42, {})
    with pytest.raises(ResourceNotFoundError):
        repo.delete(42)


def test_delete_removes_row(tmp_path: Path) -> None:
    repo = _repo(tmp_path)
    [created] = repo.insert_many([Resource(title="Gone soon", link="https://example.com/g")])

    repo.delete(created.id)

    assert repo.list_all() == []

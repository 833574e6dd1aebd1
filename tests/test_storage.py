import pytest

from mwa_survey.services.storage import InMemoryRunStore


@pytest.fixture
def store():
    return InMemoryRunStore()


def test_create_and_get_return_copies(store):
    created = store.create_run({"run_id": "r1", "status": "active", "answers": {"mwaIndications": []}})

    assert created["history"] == []
    assert created["created_at"] == created["updated_at"]

    created["answers"]["mwaIndications"].append("benign")
    assert store.get_run("r1")["answers"]["mwaIndications"] == []


def test_create_requires_unique_id(store):
    store.create_run({"run_id": "r1"})
    with pytest.raises(ValueError):
        store.create_run({"run_id": "r1"})
    with pytest.raises(ValueError):
        store.create_run({"status": "active"})


def test_unknown_run(store):
    assert store.get_run("missing") is None
    with pytest.raises(KeyError):
        store.update_run("missing", status="submitted")


def test_record_step_appends_history(store):
    store.create_run({"run_id": "r1", "section": "A"})

    run = store.record_step(
        "r1",
        {"action": "advance", "from_section": "A", "to_section": "B"},
        section="B",
    )

    assert run["section"] == "B"
    assert run["history"] == [{"action": "advance", "from_section": "A", "to_section": "B"}]


def test_clear(store):
    store.create_run({"run_id": "r1"})
    store.clear()
    assert store.get_run("r1") is None

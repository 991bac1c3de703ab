from __future__ import annotations

import json

import pytest

from civicreport.catalog.loader import load_issues
from civicreport.catalog.store import IssueStore, issue_predicate
from civicreport.core.errors import IssueNotFound
from civicreport.domain.models import IssueCreate, IssueLocation, IssueUpdate


def _payload(**kwargs) -> IssueCreate:
    return IssueCreate(
        title=kwargs.pop("title", "Graffiti on underpass"),
        category=kwargs.pop("category", "graffiti"),
        location=IssueLocation(latitude=28.62, longitude=77.21, address="ITO underpass"),
        **kwargs,
    )


def test_list_is_newest_first_and_filterable(delhi_issues):
    store = IssueStore(delhi_issues)
    assert [i.id for i in store.list()] == ["3", "2", "1", "4"]
    assert [i.id for i in store.list(status="open")] == ["3", "1"]
    assert [i.id for i in store.list(category="lighting")] == ["2"]
    assert store.list(category="lighting", status="open") == []


def test_issue_predicate_unset_filters_match_everything(delhi_issues):
    assert all(issue_predicate()(i) for i in delhi_issues)
    assert [i.id for i in delhi_issues if issue_predicate(category="vegetation")(i)] == ["4"]


def test_status_filter_accepts_legacy_spelling(delhi_issues):
    store = IssueStore(delhi_issues)
    assert [i.id for i in store.list(status="in-progress")] == ["2"]
    assert [i.id for i in delhi_issues if issue_predicate(status="In-Progress")(i)] == ["2"]


def test_list_by_reporter(delhi_issues):
    store = IssueStore(delhi_issues)
    assert [i.id for i in store.list(reporter_id="u2")] == ["3", "1"]
    assert [i.id for i in store.list(reporter_id="u2", status="open", category="sanitation")] == ["3"]
    assert store.list(reporter_id="nobody") == []


def test_add_assigns_id_and_opens_status_log():
    store = IssueStore()
    issue = store.add(_payload(reporter_name="Asha"))
    assert len(issue.id) == 32
    assert issue.status == "open"
    assert [e.status for e in issue.status_log] == ["open"]
    assert store.get(issue.id) == issue
    assert len(store) == 1


def test_blank_title_is_rejected():
    with pytest.raises(ValueError, match="blank"):
        _payload(title="   ")


def test_update_status_appends_to_log():
    store = IssueStore()
    issue = store.add(_payload())
    updated = store.update(issue.id, IssueUpdate(status="in-progress"))
    assert updated.status == "in_progress"
    assert [e.status for e in updated.status_log] == ["open", "in_progress"]
    assert updated.updated_at >= issue.updated_at

    # Same status again: no new log entry.
    again = store.update(issue.id, IssueUpdate(status="in_progress", title="Graffiti cleaned partially"))
    assert len(again.status_log) == 2
    assert again.title == "Graffiti cleaned partially"


def test_update_keeps_unset_fields():
    store = IssueStore()
    issue = store.add(_payload(description="Spray paint on the wall"))
    updated = store.update(issue.id, IssueUpdate(priority="high"))
    assert updated.priority == "high"
    assert updated.description == "Spray paint on the wall"
    assert updated.location == issue.location


def test_vote_and_delete():
    store = IssueStore()
    issue = store.add(_payload())
    store.vote(issue.id, "up")
    store.vote(issue.id, "up")
    voted = store.vote(issue.id, "down")
    assert (voted.upvotes, voted.downvotes) == (2, 1)

    store.delete(issue.id)
    with pytest.raises(IssueNotFound):
        store.get(issue.id)


def test_flag_toggles():
    store = IssueStore()
    issue = store.add(_payload())
    assert issue.is_flagged is False
    assert store.flag(issue.id).is_flagged is True
    assert store.flag(issue.id).is_flagged is False
    assert store.get(issue.id).is_flagged is False


def test_anonymous_report_hides_name_but_keeps_reporter():
    store = IssueStore()
    issue = store.add(_payload(reporter_id="u9", reporter_name="Asha", is_anonymous=True))
    assert issue.is_anonymous is True
    assert issue.reporter_name == "Anonymous"
    assert [i.id for i in store.list(reporter_id="u9")] == [issue.id]


@pytest.mark.parametrize("op", ["get", "update", "vote", "flag", "delete"])
def test_unknown_id_raises_not_found(op):
    store = IssueStore()
    calls = {
        "get": lambda: store.get("nope"),
        "update": lambda: store.update("nope", IssueUpdate(title="x")),
        "vote": lambda: store.vote("nope", "up"),
        "flag": lambda: store.flag("nope"),
        "delete": lambda: store.delete("nope"),
    }
    with pytest.raises(IssueNotFound, match="nope"):
        calls[op]()


def test_from_file_and_persist(issues_file):
    store = IssueStore.from_file(issues_file, persist=True)
    assert len(store) == 4

    created = store.add(_payload())
    store.delete("4")

    reloaded = load_issues(issues_file)
    assert {i.id for i in reloaded} == {"1", "2", "3", created.id}


def test_from_missing_file_starts_empty(tmp_path):
    store = IssueStore.from_file(tmp_path / "missing.json")
    assert len(store) == 0


def test_loader_normalizes_legacy_status(tmp_path):
    path = tmp_path / "legacy.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "a",
                    "title": "Broken sidewalk",
                    "category": "sidewalk",
                    "status": "in-progress",
                    "location": {"latitude": 28.6, "longitude": 77.2},
                }
            ]
        ),
        encoding="utf-8",
    )
    (issue,) = load_issues(path)
    assert issue.status == "in_progress"


def test_loader_rejects_out_of_range_coordinates(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(
        json.dumps([{"id": "a", "title": "x", "location": {"latitude": 91, "longitude": 0}}]),
        encoding="utf-8",
    )
    with pytest.raises(ValueError):
        load_issues(path)


def test_failed_save_leaves_store_unchanged(issues_file, monkeypatch):
    import civicreport.catalog.store as store_mod

    store = IssueStore.from_file(issues_file, persist=True)
    before = store.list()

    def _fail(path, issues):
        raise OSError("disk full")

    monkeypatch.setattr(store_mod, "dump_issues", _fail)
    with pytest.raises(OSError):
        store.add(_payload())
    with pytest.raises(OSError):
        store.update("1", IssueUpdate(status="resolved"))
    with pytest.raises(OSError):
        store.vote("1", "up")
    with pytest.raises(OSError):
        store.flag("1")
    with pytest.raises(OSError):
        store.delete("4")

    assert store.list() == before
    assert {i.id for i in load_issues(issues_file)} == {"1", "2", "3", "4"}

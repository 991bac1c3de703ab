"""
In-memory issue store.

A small CRUD layer over `Issue` models, optionally seeded from (and persisted to)
the JSON catalog. It plays the part of the REST backend's collection: the feed
and the API read the current candidate set from here.
"""

from __future__ import annotations

import logging
import threading
import uuid
from pathlib import Path
from typing import Callable, Literal

from civicreport.catalog.loader import dump_issues, load_issues
from civicreport.core.errors import IssueNotFound
from civicreport.domain.models import Issue, IssueCreate, IssueUpdate, StatusLogEntry, normalize_status, utcnow

logger = logging.getLogger(__name__)


def issue_predicate(
    *,
    category: str | None = None,
    status: str | None = None,
    reporter_id: str | None = None,
) -> Callable[[Issue], bool]:
    """Build a category/status/reporter filter; an unset filter matches everything."""
    status = normalize_status(status)

    def _matches(issue: Issue) -> bool:
        if category and issue.category != category:
            return False
        if status and issue.status != status:
            return False
        if reporter_id and issue.reporter_id != reporter_id:
            return False
        return True

    return _matches


class IssueStore:
    def __init__(self, issues: list[Issue] | None = None, *, path: str | Path | None = None, persist: bool = False):
        self._lock = threading.Lock()
        self._issues: dict[str, Issue] = {i.id: i for i in (issues or [])}
        self._path = path
        self._persist = bool(persist and path)

    @classmethod
    def from_file(cls, path: str | Path, *, persist: bool = False) -> "IssueStore":
        """Seed a store from the catalog; a missing file yields an empty store."""
        try:
            issues = load_issues(path)
        except FileNotFoundError:
            logger.warning("Issue catalog not found at %s; starting empty", path)
            issues = []
        logger.info("Loaded %d issues from %s", len(issues), path)
        return cls(issues, path=path, persist=persist)

    def __len__(self) -> int:
        with self._lock:
            return len(self._issues)

    def _commit(self, issues: dict[str, Issue]) -> None:
        # Caller holds the lock. Persist first so a failed write leaves memory untouched.
        if self._persist and self._path is not None:
            dump_issues(self._path, list(issues.values()))
        self._issues = issues

    def list(
        self,
        *,
        category: str | None = None,
        status: str | None = None,
        reporter_id: str | None = None,
    ) -> list[Issue]:
        """Return issues newest first, optionally filtered by category/status/reporter."""
        with self._lock:
            issues = list(self._issues.values())
        pred = issue_predicate(category=category, status=status, reporter_id=reporter_id)
        return sorted((i for i in issues if pred(i)), key=lambda i: i.created_at, reverse=True)

    def get(self, issue_id: str) -> Issue:
        with self._lock:
            issue = self._issues.get(issue_id)
        if issue is None:
            raise IssueNotFound(issue_id)
        return issue

    def add(self, payload: IssueCreate) -> Issue:
        now = utcnow()
        fields = payload.model_dump()
        if payload.is_anonymous:
            # Keep reporter_id so the reporter still sees it under their own reports.
            fields["reporter_name"] = "Anonymous"
        issue = Issue(
            id=uuid.uuid4().hex,
            **fields,
            status="open",
            created_at=now,
            updated_at=now,
            status_log=[StatusLogEntry(status="open", timestamp=now)],
        )
        with self._lock:
            self._commit({**self._issues, issue.id: issue})
        logger.info("Issue %s reported (%s)", issue.id, issue.category)
        return issue

    def update(self, issue_id: str, payload: IssueUpdate) -> Issue:
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        with self._lock:
            current = self._issues.get(issue_id)
            if current is None:
                raise IssueNotFound(issue_id)
            now = utcnow()
            updates = {**changes, "updated_at": now}
            if "status" in changes and changes["status"] != current.status:
                updates["status_log"] = [
                    *current.status_log,
                    StatusLogEntry(status=changes["status"], timestamp=now),
                ]
            # Re-validate so a partial update can never produce an invalid Issue.
            issue = Issue.model_validate({**current.model_dump(), **updates})
            self._commit({**self._issues, issue_id: issue})
        if issue.status != current.status:
            logger.info("Issue %s status %s -> %s", issue_id, current.status, issue.status)
        return issue

    def _replace(self, issue_id: str, make: Callable[[Issue], Issue]) -> Issue:
        with self._lock:
            current = self._issues.get(issue_id)
            if current is None:
                raise IssueNotFound(issue_id)
            issue = make(current)
            self._commit({**self._issues, issue_id: issue})
        return issue

    def vote(self, issue_id: str, direction: Literal["up", "down"]) -> Issue:
        field = "upvotes" if direction == "up" else "downvotes"
        return self._replace(issue_id, lambda cur: cur.model_copy(update={field: getattr(cur, field) + 1}))

    def flag(self, issue_id: str) -> Issue:
        """Toggle the moderation flag on an issue."""
        issue = self._replace(issue_id, lambda cur: cur.model_copy(update={"is_flagged": not cur.is_flagged}))
        logger.info("Issue %s %s", issue_id, "flagged" if issue.is_flagged else "unflagged")
        return issue

    def delete(self, issue_id: str) -> None:
        with self._lock:
            if issue_id not in self._issues:
                raise IssueNotFound(issue_id)
            self._commit({k: v for k, v in self._issues.items() if k != issue_id})
        logger.info("Issue %s deleted", issue_id)

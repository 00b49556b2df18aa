from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

from src.timesheet_system.timesheet_system.container import Container, assemble
from src.timesheet_system.timesheet_system.core.enums import Role, TimesheetStatus
from src.timesheet_system.timesheet_system.entries.model import TimesheetEntry
from src.timesheet_system.timesheet_system.history.model import ApprovalHistoryEntry
from src.timesheet_system.timesheet_system.projects.model import Project
from src.timesheet_system.timesheet_system.timesheets.model import Timesheet
from src.timesheet_system.timesheet_system.users.model import User


class TickingClock:
    """Advances one minute per call so ledger order is easy to assert."""

    def __init__(self, start: datetime = datetime(2026, 2, 1, 9, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(minutes=1)
        return value


class InMemoryUsers:
    def __init__(self, *users: User):
        self.users: dict[str, User] = {u.user_id: u for u in users}

    def add(self, user: User) -> User:
        self.users[user.user_id] = user
        return user

    def get_by_id(self, user_id):
        return self.users.get(str(user_id))

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, *, email, role, first_name=None, last_name=None, manager_id=None):
        user_id = f"u-{len(self.users) + 1}"
        self.users[user_id] = User(
            user_id=user_id,
            email=email,
            role=role,
            manager_id=manager_id,
            first_name=first_name,
            last_name=last_name,
        )
        return user_id

    def list_by_role(self, role):
        return [u for u in self.users.values() if u.role == role]


class InMemoryProjects:
    def __init__(self, *projects: Project):
        self.projects: dict[str, Project] = {p.project_id: p for p in projects}

    def get_by_id(self, project_id):
        return self.projects.get(str(project_id))

    def create(self, *, name, owner_id, code=None):
        project_id = f"p-{len(self.projects) + 1}"
        self.projects[project_id] = Project(project_id=project_id, name=name, owner_id=owner_id, code=code)
        return project_id

    def list_for_owner(self, owner_id):
        return [p for p in self.projects.values() if p.owner_id == owner_id]


class InMemoryHistory:
    def __init__(self):
        self.rows: list[ApprovalHistoryEntry] = []
        self.fail_appends = False

    def append(self, entry):
        if self.fail_appends:
            raise RuntimeError("ledger down")
        history_id = len(self.rows) + 1
        self.rows.append(
            ApprovalHistoryEntry(
                history_id=history_id,
                timesheet_id=entry.timesheet_id,
                action=entry.action,
                actor_id=entry.actor_id,
                timestamp=entry.timestamp,
                from_status=entry.from_status,
                to_status=entry.to_status,
                comment=entry.comment,
            )
        )
        return history_id

    def _for(self, timesheet_id, action=None):
        rows = [r for r in self.rows if r.timesheet_id == timesheet_id and (action is None or r.action == action)]
        return sorted(rows, key=lambda r: (r.timestamp, r.history_id))

    def list_for_timesheet(self, timesheet_id, *, action=None, limit=None, offset=0):
        rows = self._for(timesheet_id, action)
        return rows[offset:] if limit is None else rows[offset : offset + limit]

    def count_for_timesheet(self, timesheet_id, *, action=None):
        return len(self._for(timesheet_id, action))

    def last_timestamp(self, timesheet_id):
        rows = self._for(timesheet_id)
        return rows[-1].timestamp if rows else None


class InMemoryTimesheets:
    """Status write and ledger append happen under one lock, like one DB transaction."""

    def __init__(self, history: InMemoryHistory):
        self.rows: dict[str, Timesheet] = {}
        self.history = history
        self.lock = threading.Lock()

    def add(self, ts: Timesheet) -> Timesheet:
        self.rows[ts.timesheet_id] = ts
        return ts

    def get_by_id(self, timesheet_id):
        return self.rows.get(str(timesheet_id))

    def get_by_period(self, *, user_id, month, year):
        return next(
            (t for t in self.rows.values() if (t.user_id, t.month, t.year) == (user_id, int(month), int(year))),
            None,
        )

    def get_or_create(self, *, user_id, month, year):
        with self.lock:
            existing = self.get_by_period(user_id=user_id, month=month, year=year)
            if existing:
                return existing
            ts = Timesheet(timesheet_id=f"ts-{uuid.uuid4().hex[:8]}", user_id=user_id, month=int(month), year=int(year))
            self.rows[ts.timesheet_id] = ts
            return ts

    def list_visible(self, *, user_id):
        return [t for t in self.rows.values() if user_id in (t.user_id, t.current_approver_id)]

    def list_for_approver(self, *, approver_id, include_status=None, limit=500):
        rows = [
            t
            for t in self.rows.values()
            if t.current_approver_id == approver_id or (include_status is not None and t.status == include_status)
        ]
        rows.sort(key=lambda t: t.submit_date or datetime.min, reverse=True)
        return rows[:limit]

    def apply_transition(self, *, expected_status, updated, history):
        with self.lock:
            stored = self.rows.get(updated.timesheet_id)
            if stored is None or stored.status != expected_status:
                return None
            self.history.append(history)
            self.rows[updated.timesheet_id] = updated
            return updated


class InMemoryEntries:
    def __init__(self, timesheets: InMemoryTimesheets, history: InMemoryHistory):
        self.rows: dict[str, TimesheetEntry] = {}
        self.timesheets = timesheets
        self.history = history
        self.created = 0

    def add(self, entry: TimesheetEntry) -> TimesheetEntry:
        self.rows[entry.entry_id] = entry
        return entry

    def _parent_status(self, timesheet_id) -> Optional[TimesheetStatus]:
        ts = self.timesheets.get_by_id(timesheet_id)
        return ts.status if ts else None

    def get_by_id(self, entry_id):
        return self.rows.get(str(entry_id))

    def list_for_timesheet(self, timesheet_id):
        rows = [e for e in self.rows.values() if e.timesheet_id == timesheet_id]
        return sorted(rows, key=lambda e: (e.work_date, e.entry_id))

    def count_for_timesheet(self, timesheet_id):
        return len(self.list_for_timesheet(timesheet_id))

    def totals_for_timesheets(self, timesheet_ids):
        out = {}
        for tid in timesheet_ids:
            rows = self.list_for_timesheet(tid)
            if rows:
                out[tid] = (sum(e.logged_hours for e in rows), sum(e.effective_hours for e in rows))
        return out

    def create(self, *, timesheet_id, fields, allowed_statuses):
        if self._parent_status(timesheet_id) not in allowed_statuses:
            return None
        self.created += 1
        entry_id = f"e-new-{self.created}"
        self.rows[entry_id] = TimesheetEntry(
            entry_id=entry_id,
            timesheet_id=timesheet_id,
            work_date=fields.work_date,
            project_id=fields.project_id,
            task_id=fields.task_id,
            logged_hours=fields.logged_hours,
            description=fields.description,
        )
        return entry_id

    def update(self, *, entry_id, fields, allowed_statuses):
        entry = self.rows.get(entry_id)
        if not entry or self._parent_status(entry.timesheet_id) not in allowed_statuses:
            return False
        self.rows[entry_id] = replace(
            entry,
            work_date=fields.work_date,
            project_id=fields.project_id,
            task_id=fields.task_id,
            logged_hours=fields.logged_hours,
            description=fields.description,
        )
        return True

    def delete(self, *, entry_id, allowed_statuses):
        entry = self.rows.get(entry_id)
        if not entry or self._parent_status(entry.timesheet_id) not in allowed_statuses:
            return False
        del self.rows[entry_id]
        return True

    def apply_approved_hours(self, *, entry_id, expected_status, approved_hours, modified_by, modified_at, history):
        with self.timesheets.lock:
            entry = self.rows.get(entry_id)
            if not entry or self._parent_status(entry.timesheet_id) != expected_status:
                return False
            self.history.append(history)
            self.rows[entry_id] = replace(
                entry,
                approved_hours=approved_hours,
                hours_modified_by=modified_by,
                hours_modified_at=modified_at,
            )
            return True


class Settings:
    ALLOW_IMPERSONATION = True
    ALLOW_ADMIN_DIRECT_APPROVAL = True
    AUTO_PROVISION_USERS = True
    HISTORY_PAGE_SIZE = 100


ADMIN = User(user_id="admin", email="admin@example.com", role=Role.ADMIN, first_name="Ada")
ADMIN_2 = User(user_id="admin2", email="admin2@example.com", role=Role.ADMIN, first_name="Bo")
LEAD = User(user_id="lead", email="lead@example.com", role=Role.TEAM_LEAD, manager_id="admin", first_name="Lee")
EMPLOYEE = User(user_id="emp", email="emp@example.com", role=Role.EMPLOYEE, manager_id="lead", first_name="Emma")
ORPHAN = User(user_id="orphan", email="orphan@example.com", role=Role.EMPLOYEE)

P1 = Project(project_id="P1", name="Internal", owner_id="admin", code="INT")


class World:
    """A container over in-memory repositories with a small org chart."""

    def __init__(self, settings=Settings, *, timesheets_cls=InMemoryTimesheets, **settings_overrides):
        if settings_overrides:
            settings = type("OverriddenSettings", (settings,), settings_overrides)
        self.clock = TickingClock()
        self.users = InMemoryUsers(ADMIN, ADMIN_2, LEAD, EMPLOYEE, ORPHAN)
        self.projects = InMemoryProjects(P1)
        self.history = InMemoryHistory()
        self.timesheets = timesheets_cls(self.history)
        self.entries = InMemoryEntries(self.timesheets, self.history)
        self.container: Container = assemble(
            users_repo=self.users,
            projects_repo=self.projects,
            timesheets_repo=self.timesheets,
            entries_repo=self.entries,
            history_repo=self.history,
            settings=settings,
            clock=self.clock,
        )

    @property
    def engine(self):
        return self.container.workflow_engine

    def timesheet(
        self,
        *,
        status=TimesheetStatus.DRAFT,
        owner=EMPLOYEE,
        approver_id=None,
        ts_id="ts-1",
        month=2,
        year=2026,
        submit_date=None,
    ):
        return self.timesheets.add(
            Timesheet(
                timesheet_id=ts_id,
                user_id=owner.user_id,
                month=month,
                year=year,
                status=status,
                current_approver_id=approver_id,
                submit_date=submit_date,
            )
        )

    def entry(self, *, ts_id="ts-1", entry_id="E1", hours=8.0, day=2, project_id="P1"):
        ts = self.timesheets.get_by_id(ts_id)
        return self.entries.add(
            TimesheetEntry(
                entry_id=entry_id,
                timesheet_id=ts_id,
                work_date=date(ts.year, ts.month, day),
                project_id=project_id,
                logged_hours=hours,
            )
        )

    def status(self, ts_id="ts-1") -> TimesheetStatus:
        return self.timesheets.get_by_id(ts_id).status

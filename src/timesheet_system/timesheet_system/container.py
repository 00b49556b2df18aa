from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .common.datetime_utils import now_local
from .core.constants import DEFAULT_HISTORY_PAGE_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .entries.mysql_entry_repository import MySQLEntryRepository
from .entries.repository import EntryRepository
from .history.mysql_history_repository import MySQLHistoryRepository
from .history.repository import HistoryRepository
from .history.service import ApprovalLedger
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository
from .projects.service import ProjectService
from .reconciliation.service import ReconciliationService
from .timesheets.mysql_timesheet_repository import MySQLTimesheetRepository
from .timesheets.repository import TimesheetRepository
from .timesheets.service import TimesheetQueryService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import IdentityResolver
from .workflow.service import WorkflowEngine


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    projects_repo: ProjectRepository
    timesheets_repo: TimesheetRepository
    entries_repo: EntryRepository
    history_repo: HistoryRepository

    identity: IdentityResolver
    ledger: ApprovalLedger
    workflow_engine: WorkflowEngine
    reconciliation_service: ReconciliationService
    timesheet_queries: TimesheetQueryService
    project_service: ProjectService


def assemble(
    *,
    users_repo: UserRepository,
    projects_repo: ProjectRepository,
    timesheets_repo: TimesheetRepository,
    entries_repo: EntryRepository,
    history_repo: HistoryRepository,
    settings: Any = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""

    def flag(name: str, default):
        return getattr(settings, name, default) if settings is not None else default

    identity = IdentityResolver(users_repo, allow_impersonation=bool(flag("ALLOW_IMPERSONATION", False)))
    ledger = ApprovalLedger(
        history_repo,
        clock=clock,
        page_size=int(flag("HISTORY_PAGE_SIZE", DEFAULT_HISTORY_PAGE_SIZE)),
    )
    workflow_engine = WorkflowEngine(
        timesheets_repo,
        entries_repo,
        users_repo,
        ledger,
        allow_admin_direct_approval=bool(flag("ALLOW_ADMIN_DIRECT_APPROVAL", True)),
    )
    reconciliation_service = ReconciliationService(timesheets_repo, entries_repo, projects_repo)
    timesheet_queries = TimesheetQueryService(timesheets_repo, entries_repo, ledger)
    project_service = ProjectService(
        projects_repo,
        identity,
        auto_provision_users=bool(flag("AUTO_PROVISION_USERS", False)),
    )

    return Container(
        users_repo=users_repo,
        projects_repo=projects_repo,
        timesheets_repo=timesheets_repo,
        entries_repo=entries_repo,
        history_repo=history_repo,
        identity=identity,
        ledger=ledger,
        workflow_engine=workflow_engine,
        reconciliation_service=reconciliation_service,
        timesheet_queries=timesheet_queries,
        project_service=project_service,
    )


def build_container(*, db_config: dict, settings: Optional[Any] = None) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        users_repo=MySQLUserRepository(conn),
        projects_repo=MySQLProjectRepository(conn),
        timesheets_repo=MySQLTimesheetRepository(conn),
        entries_repo=MySQLEntryRepository(conn),
        history_repo=MySQLHistoryRepository(conn),
        settings=settings,
    )

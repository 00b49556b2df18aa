"""Example: drive the workflow through the service layer (no Flask).

Controllers are a thin layer; every rule lives in the services.
"""

import importlib

from config import get_settings_module

from src.timesheet_system.timesheet_system.container import build_container
from src.timesheet_system.timesheet_system.workflow.commands import SubmitCommand


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    employee = container.identity.resolve("employee")
    detail = container.timesheet_queries.get_for_period(actor=employee, month=1, year=2026)
    if detail is None:
        print("No timesheet for 2026-01; save some entries first.")
        return

    ts = container.workflow_engine.submit(actor=employee, command=SubmitCommand(timesheet_id=detail.timesheet.timesheet_id))
    print(ts.to_dict())


if __name__ == "__main__":
    main()

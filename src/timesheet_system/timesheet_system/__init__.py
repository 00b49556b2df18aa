"""Timesheet System package.

Feature modules (users, timesheets, entries, history, workflow, ...) with a
thin Flask controller layer over service/repository layers.
"""

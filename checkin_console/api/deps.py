"""
FastAPI dependencies resolving the console services
"""

from fastapi import Depends, Request

from checkin_console.services.assignment_service import AssignmentService
from checkin_console.services.checkin_service import CheckInService
from checkin_console.services.console import Console
from checkin_console.services.queries import ConsoleQueries


def get_console(request: Request) -> Console:
    return request.app.state.console


def get_queries(console: Console = Depends(get_console)) -> ConsoleQueries:
    return console.queries


def get_checkin_service(queries: ConsoleQueries = Depends(get_queries)) -> CheckInService:
    return CheckInService(queries)


def get_assignment_service(queries: ConsoleQueries = Depends(get_queries)) -> AssignmentService:
    return AssignmentService(queries)

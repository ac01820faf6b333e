"""
Shared fixtures: an in-process fake of the backend REST API
"""

import json

import httpx
import pytest

from checkin_console.core.session import SessionContext
from checkin_console.services.console import Console
from checkin_console.services.query_client import QueryClient

BACKEND_URL = "http://backend.test"


class FakeBackend:
    """Routes requests to canned responses and records every call"""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, json=None, status=200, handler=None):
        if handler is None:
            def handler(request, _body=json, _status=status):
                if _body is None:
                    return httpx.Response(_status)
                return httpx.Response(_status, json=_body)
        self.routes[(method, path)] = handler

    async def handle(self, request):
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"Message": f"No route for {request.method} {request.url.path}"})
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def body(self, request):
        return json.loads(request.content)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def guest_record(guest_id, name, event_id=1, **custom):
    return {
        "ID": guest_id,
        "ProjectID": 1,
        "EventID": event_id,
        "Name": name,
        "Email": f"{name.split()[0].lower()}@example.com",
        "Phone": None,
        "Options": json.dumps(custom),
        "CreatedAt": "2025-01-10T08:00:00Z",
        "UpdatedAt": "2025-01-10T08:00:00Z",
    }


def event_record(event_id, name, hotels=(), rooms=()):
    return {
        "ID": event_id,
        "ProjectID": 1,
        "Name": name,
        "Description": "",
        "Options": json.dumps({"Hotels": list(hotels), "Rooms": list(rooms)}),
    }


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session():
    return SessionContext()


@pytest.fixture
def console(backend, clock, session):
    return Console(
        session=session,
        transport=httpx.MockTransport(backend.handle),
        query_client=QueryClient(stale_time=30, retry=1, retry_delay=0, clock=clock),
        base_url=BACKEND_URL,
        project_id="1",
    )


@pytest.fixture
def queries(console):
    return console.queries

"""
Tests for the query cache: sharing, freshness, invalidation and retries
"""

import asyncio

import httpx
import pytest

from checkin_console.core.errors import NotFoundError, RequestError, ServerError
from checkin_console.core.session import SessionContext
from checkin_console.schemas.common import ListQueryParams
from checkin_console.schemas.guest import GuestUpdate
from checkin_console.services.console import Console
from checkin_console.services.query_client import MutationStatus, QueryClient, QueryStatus
from checkin_console.services.queries import query_keys

from conftest import BACKEND_URL, event_record, guest_record


def counting_handler(responses):
    """Serve ``responses`` in order, repeating the last one"""
    served = []

    def handler(request):
        body, status = responses[min(len(served), len(responses) - 1)]
        served.append(request)
        return httpx.Response(status, json=body)

    return handler


def test_concurrent_identical_reads_share_one_request(backend, queries):
    backend.add("GET", "/1/events", json={"Data": [event_record(1, "Gala")]})

    async def scenario():
        return await asyncio.gather(queries.events(), queries.events(), queries.events())

    first, second, third = asyncio.run(scenario())

    assert len(backend.calls("GET", "/1/events")) == 1
    assert first is second is third


def test_different_parameters_are_cached_separately(backend, queries):
    backend.add("GET", "/1/events", json={"Data": []})

    async def scenario():
        await queries.events(ListQueryParams(page=1))
        await queries.events(ListQueryParams(page=2))
        await queries.events(ListQueryParams(page=1))

    asyncio.run(scenario())

    pages = [r.url.params["page"] for r in backend.calls("GET", "/1/events")]
    assert pages == ["1", "2"]


def test_fresh_data_is_served_from_cache(backend, queries, clock):
    """Within the stale window no request is sent"""
    backend.add("GET", "/1/events", json={"Data": []})

    async def scenario():
        await queries.events()
        clock.advance(10)
        await queries.events()
        assert len(backend.calls("GET", "/1/events")) == 1

        clock.advance(25)
        await queries.events()
        assert len(backend.calls("GET", "/1/events")) == 2

    asyncio.run(scenario())


def test_guest_update_invalidates_guest_lists(backend, queries):
    backend.add("GET", "/1/events", json={"Data": []})
    backend.add("GET", "/1/events/1/guests", json={"Data": [guest_record(5, "Ann Lee")]})
    backend.add("PUT", "/1/events/1/guests/5", json={"Data": guest_record(5, "Ann Lee", Hotel="Grand")})

    async def scenario():
        await queries.events()
        await queries.guests(1)
        await queries.update_guest(1, 5, GuestUpdate(event_id=1, name="Ann Lee"))
        await queries.guests(1)
        await queries.events()

    asyncio.run(scenario())

    assert len(backend.calls("GET", "/1/events/1/guests")) == 2
    assert len(backend.calls("GET", "/1/events")) == 1


def test_checkin_invalidates_every_guest_list(backend, queries):
    backend.add("GET", "/1/events/1/guests", json={"Data": []})
    backend.add("GET", "/1/events/2/guests", json={"Data": []})
    backend.add("POST", "/1/guests/checkin/5", json={"Message": "ok"})

    async def scenario():
        await queries.guests(1)
        await queries.guests(2)
        await queries.checkin_guest(5)
        await queries.guests(1)
        await queries.guests(2)

    asyncio.run(scenario())

    assert len(backend.calls("GET", "/1/events/1/guests")) == 2
    assert len(backend.calls("GET", "/1/events/2/guests")) == 2


def test_event_delete_invalidates_its_guest_lists(backend, queries):
    backend.add("GET", "/1/events/4/guests", json={"Data": []})
    backend.add("DELETE", "/1/events/4", json={"Message": "deleted"})

    async def scenario():
        await queries.guests(4)
        await queries.delete_event(4)
        return queries.client.get_query_state(query_keys.guest_list(4))

    state = asyncio.run(scenario())

    assert state.is_stale


def test_login_invalidates_everything(backend, queries):
    backend.add("GET", "/users", json={"Data": []})
    backend.add("POST", "/login", json={"Data": {"AccessToken": "tok"}})

    async def scenario():
        await queries.users()
        await queries.login("admin", "pw")
        await queries.users()

    asyncio.run(scenario())

    calls = backend.calls("GET", "/users")
    assert len(calls) == 2
    assert calls[1].headers["Authorization"] == "Bearer tok"


def test_logout_clears_session_and_cache(backend, queries, session):
    session.set_token("tok")
    backend.add("GET", "/users", json={"Data": []})

    asyncio.run(queries.users())
    assert len(queries.client) == 1

    queries.logout()

    assert len(queries.client) == 0
    assert session.token is None


def test_server_errors_are_retried_once_for_reads(backend, queries):
    backend.add("GET", "/1/events", handler=counting_handler([({"Message": "boom"}, 500)]))

    with pytest.raises(ServerError):
        asyncio.run(queries.events())

    assert len(backend.calls("GET", "/1/events")) == 2


def test_read_recovers_after_one_server_error(backend, queries):
    backend.add("GET", "/1/events", handler=counting_handler([
        ({"Message": "boom"}, 502),
        ({"Data": [event_record(1, "Gala")]}, 200),
    ]))

    response = asyncio.run(queries.events())

    assert [e.name for e in response.items] == ["Gala"]
    assert len(backend.calls("GET", "/1/events")) == 2


@pytest.mark.parametrize("status, error_cls", [(404, NotFoundError), (422, RequestError)])
def test_client_errors_are_not_retried(backend, queries, status, error_cls):
    backend.add("GET", "/1/events", json={"Message": "bad"}, status=status)

    with pytest.raises(error_cls):
        asyncio.run(queries.events())

    assert len(backend.calls("GET", "/1/events")) == 1


def test_mutations_are_not_retried(backend, queries):
    backend.add("DELETE", "/1/events/1/guests/5", json={"Message": "boom"}, status=500)

    with pytest.raises(ServerError):
        asyncio.run(queries.delete_guest(1, 5))

    assert len(backend.calls("DELETE", "/1/events/1/guests/5")) == 1
    assert queries.delete_guest.status == MutationStatus.ERROR
    assert isinstance(queries.delete_guest.error, ServerError)


def test_successful_mutation_records_its_result(backend, queries):
    backend.add("PUT", "/1/events/1/guests/5", json={"Data": guest_record(5, "Ann Lee")})

    asyncio.run(queries.update_guest(1, 5, GuestUpdate(event_id=1, name="Ann Lee")))

    assert queries.update_guest.status == MutationStatus.SUCCESS
    assert queries.update_guest.data.id == 5
    assert queries.update_guest.error is None


def test_failed_refresh_keeps_previous_data(backend, queries):
    """Data and error are independent; a stale value survives a failed refetch"""
    backend.add("GET", "/1/events", handler=counting_handler([
        ({"Data": [event_record(1, "Gala")]}, 200),
        ({"Message": "down"}, 503),
    ]))
    key = query_keys.event_list()

    async def scenario():
        await queries.events()
        queries.client.invalidate_queries(query_keys.event_lists())
        with pytest.raises(ServerError):
            await queries.events()

    asyncio.run(scenario())

    state = queries.client.get_query_state(key)
    assert state.status == QueryStatus.ERROR
    assert state.has_data
    assert [e.name for e in state.data.items] == ["Gala"]
    assert not state.is_fetching


def test_response_invalidated_in_flight_is_not_cached(backend, queries):
    async def scenario():
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow(request):
            started.set()
            await release.wait()
            return httpx.Response(200, json={"Data": [guest_record(5, "Ann Lee")]})

        backend.add("GET", "/1/events/1/guests", handler=slow)

        pending = asyncio.ensure_future(queries.guests(1))
        await started.wait()
        queries.client.invalidate_queries(query_keys.guest_lists())
        release.set()
        response = await pending
        return response

    response = asyncio.run(scenario())

    # The caller still gets its answer, the cache does not keep it
    assert [g.id for g in response.items] == [5]
    state = queries.client.get_query_state(query_keys.guest_list(1))
    assert not state.has_data
    assert state.is_stale


def test_observer_discards_response_for_previous_parameters(backend, queries):
    """Switching events while a load is in flight never shows the old event's guests"""
    async def scenario():
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow(request):
            started.set()
            await release.wait()
            return httpx.Response(200, json={"Data": [guest_record(5, "Ann Lee", event_id=1)]})

        backend.add("GET", "/1/events/1/guests", handler=slow)
        backend.add("GET", "/1/events/2/guests", json={"Data": [guest_record(8, "Bo Chan", event_id=2)]})

        observer = queries.guests_observer(1)
        first = asyncio.ensure_future(observer.refresh())
        await started.wait()

        observer.set_params(2, None)
        await observer.refresh()
        assert [g.id for g in observer.result.data.items] == [8]

        release.set()
        await first
        return observer

    observer = asyncio.run(scenario())

    assert observer.params == (2, None)
    assert [g.id for g in observer.result.data.items] == [8]
    # The older response is still cached under its own key
    cached = queries.client.get_query_data(query_keys.guest_list(1))
    assert [g.id for g in cached.items] == [5]


def test_observer_surfaces_errors_in_result(backend, queries):
    backend.add("GET", "/1/events", json={"Message": "forbidden"}, status=403)

    observer = queries.events_observer()
    result = asyncio.run(observer.refresh())

    assert result.status == QueryStatus.ERROR
    assert result.error.status_code == 403
    assert not result.has_data


def test_set_query_data_is_fresh(clock):
    client = QueryClient(stale_time=30, retry=0, retry_delay=0, clock=clock)
    client.set_query_data(("events", "detail", 1), {"id": 1})

    state = client.get_query_state(("events", "detail", 1))
    assert state.data == {"id": 1}
    assert not state.is_stale

    clock.advance(31)
    assert client.get_query_state(("events", "detail", 1)).is_stale


def test_invalidate_matches_prefix_only(clock):
    client = QueryClient(stale_time=30, retry=0, retry_delay=0, clock=clock)
    client.set_query_data(("guests", "list", 1, ()), [])
    client.set_query_data(("guests", "list", 2, ()), [])
    client.set_query_data(("events", "list", ()), [])

    assert client.invalidate_queries(("guests", "list", 1)) == 1
    assert client.get_query_state(("guests", "list", 1, ())).is_stale
    assert not client.get_query_state(("guests", "list", 2, ())).is_stale
    assert not client.get_query_state(("events", "list", ())).is_stale


def test_guest_observer_is_idle_until_an_event_is_selected(backend, queries):
    backend.add("GET", "/1/events/3/guests", json={"Data": [guest_record(5, "Ann Lee", event_id=3)]})
    observer = queries.guests_observer()

    async def scenario():
        idle = await observer.refresh()
        assert backend.requests == []
        assert not idle.is_fetching and not idle.has_data

        observer.set_params(3, None)
        return await observer.refresh()

    result = asyncio.run(scenario())

    assert [g.id for g in result.data.items] == [5]
    assert len(queries.client) == 1
    assert [r.url.path for r in backend.requests] == ["/1/events/3/guests"]


def test_cache_size_stays_bounded(backend, clock):
    """Distinct filters never grow the cache past its cap"""
    backend.add("GET", "/1/events", json={"Data": []})
    client = QueryClient(stale_time=30, retry=0, retry_delay=0, clock=clock, gc_time=300, max_entries=50)
    console = Console(
        session=SessionContext(),
        transport=httpx.MockTransport(backend.handle),
        query_client=client,
        base_url=BACKEND_URL,
        project_id="1",
    )

    async def scenario():
        for n in range(200):
            clock.advance(0.1)
            await console.queries.events(ListQueryParams(query={"name": f"guest-{n}"}))

    asyncio.run(scenario())

    assert len(client) == 50
    # The most recent reads are the ones kept
    latest = query_keys.event_list(ListQueryParams(query={"name": "guest-199"}))
    assert client.get_query_data(latest) is not None
    oldest = query_keys.event_list(ListQueryParams(query={"name": "guest-0"}))
    assert client.get_query_data(oldest) is None


def test_unused_entries_expire(clock):
    client = QueryClient(stale_time=30, retry=0, retry_delay=0, clock=clock, gc_time=300, max_entries=100)
    client.set_query_data(("events", "list", ()), [])
    clock.advance(200)
    client.set_query_data(("users", "list", ()), [])
    clock.advance(150)

    assert client.collect_garbage() == 1
    assert client.get_query_data(("events", "list", ())) is None
    assert client.get_query_data(("users", "list", ())) == []


def test_entries_in_flight_are_never_evicted(clock):
    client = QueryClient(stale_time=30, retry=0, retry_delay=0, clock=clock, gc_time=10, max_entries=1)

    async def scenario():
        release = asyncio.Event()

        async def slow():
            await release.wait()
            return "slow"

        async def quick():
            return "quick"

        pending = asyncio.ensure_future(client.fetch_query(("a",), slow))
        await asyncio.sleep(0)
        clock.advance(60)
        await client.fetch_query(("b",), quick)
        assert client.get_query_state(("a",)).is_fetching

        release.set()
        return await pending

    assert asyncio.run(scenario()) == "slow"
    assert client.get_query_data(("a",)) == "slow"

"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import uuid4

import pytest

from nutrisnap.adapters.supabase_entry_repository import SupabaseEntryRepository
from nutrisnap.adapters.supabase_token_verifier import SupabaseTokenVerifier
from tests.conftest import USER_ID, make_entry


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "delete": []}
    )
    last_payload: object | None = None
    filters: list[tuple[str, str, object]] = field(default_factory=list)
    orders: list[tuple[str, bool]] = field(default_factory=list)
    limits: list[int] = field(default_factory=list)
    actions: list[str] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.filters.append(("eq", column, value))
        return self

    def gte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.filters.append(("gte", column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeTable":
        self.orders.append((column, desc))
        return self

    def limit(self, count: int) -> "FakeTable":
        self.limits.append(count)
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        self.actions.append(action)
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_add_entries_sends_one_bulk_insert() -> None:
    client = FakeSupabaseClient()
    table = client.table("food_entries")
    now = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)
    entries = [make_entry(now, name="rice"), make_entry(now, name="dal")]
    table.queue("insert", [{"id": str(entry.id)} for entry in entries])

    SupabaseEntryRepository(client).add_entries(USER_ID, entries)

    assert table.actions == ["insert"]
    payload = table.last_payload
    assert isinstance(payload, list)
    assert [row["name"] for row in payload] == ["rice", "dal"]
    assert payload[0]["user_id"] == str(USER_ID)
    assert payload[0]["id"] == str(entries[0].id)
    assert payload[0]["created_at"] == now.isoformat()


def test_add_entries_raises_on_short_write() -> None:
    client = FakeSupabaseClient()
    table = client.table("food_entries")
    now = datetime.now(tz=UTC)
    entries = [make_entry(now), make_entry(now)]
    table.queue("insert", [{"id": str(entries[0].id)}])

    with pytest.raises(RuntimeError):
        SupabaseEntryRepository(client).add_entries(USER_ID, entries)


def test_add_entries_skips_empty_batch() -> None:
    client = FakeSupabaseClient()

    SupabaseEntryRepository(client).add_entries(USER_ID, [])

    assert client.tables == {}


def test_delete_entry_filters_by_id_and_owner() -> None:
    client = FakeSupabaseClient()
    entry_id = uuid4()

    SupabaseEntryRepository(client).delete_entry(USER_ID, entry_id)

    table = client.tables["food_entries"]
    assert table.actions == ["delete"]
    assert ("eq", "id", str(entry_id)) in table.filters
    assert ("eq", "user_id", str(USER_ID)) in table.filters


def test_list_entries_since_queries_range_desc_with_cap() -> None:
    client = FakeSupabaseClient()
    table = client.table("meals")
    entry_id = uuid4()
    table.queue(
        "select",
        [
            {
                "id": str(entry_id),
                "user_id": str(USER_ID),
                "name": "paneer tikka",
                "calories": 320,
                "protein": 18,
                "carbs": 8,
                "fats": 24,
                "created_at": "2024-03-15T12:00:00.123456+00:00",
            }
        ],
    )
    since = datetime(2024, 3, 5, tzinfo=UTC)

    entries = SupabaseEntryRepository(client, table_name="meals").list_entries_since(
        USER_ID, since, 100
    )

    assert ("eq", "user_id", str(USER_ID)) in table.filters
    assert ("gte", "created_at", since.isoformat()) in table.filters
    assert table.orders == [("created_at", True)]
    assert table.limits == [100]
    assert entries[0].id == entry_id
    assert entries[0].calories == 320.0
    assert entries[0].created_at == datetime(2024, 3, 15, 12, 0, 0, 123456, tzinfo=UTC)


@dataclass
class FakeAuth:
    users: dict[str, str] = field(default_factory=dict)

    def get_user(self, jwt: str):  # type: ignore[no-untyped-def]
        if jwt not in self.users:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=self.users[jwt]))


def test_token_verifier_resolves_user() -> None:
    client = SimpleNamespace(auth=FakeAuth(users={"good": str(USER_ID)}))

    verifier = SupabaseTokenVerifier(client)  # type: ignore[arg-type]

    assert verifier.verify("good") == USER_ID
    assert verifier.verify("bad") is None

# Shared pytest fixtures
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

import pytest

from elevator_import.models.record import Record

SAMPLE_TEXT = """broj ugovora: 2023-114
upravitelj: Stanouprava d.o.o.
adresa: Ilica 10, Zagreb
broj dizala: 40-8196 ... 40-8201
predstavnik:
Ivan Horvat
zvati poslije 16h
mobitel: 091 111 2222, 098 333 4444
ulaz na zgradu: 1234
gps adresa: 45.81, 15.97

upravitelj: Gradsko stanovanje
adresa: Savska 5, Zagreb
broj dizala:
F-6575 A
F-6576 (mali), F-6577
telefon: 01 555 666
razno: kljuc u portirnici

broj ugovora:
adresa: Vukovarska 1
broj dizala: AB-12
"""

# SAMPLE_TEXT のレコード数
SAMPLE_RECORDS_EXPANDED = 10
SAMPLE_RECORDS_LITERAL = 6


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        # 実行環境の DB/API 設定が混入しないようにする
        for key in ("DATABASE_URL", "PGDSN"):
            monkeypatch.delenv(key, raising=False)
        yield p


@pytest.fixture()
def sample_text() -> str:
    return SAMPLE_TEXT


@pytest.fixture()
def input_file(temp_workdir: Path, sample_text: str) -> Path:
    f = temp_workdir / "data" / "adrese.txt"
    f.write_text(sample_text, encoding="utf-8")
    return f


@pytest.fixture()
def sample_config_yaml() -> str:
    return """database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
table: elevators
api:
  timeout_seconds: 5
  body_preview_chars: 20
defaults:
  status: active
  service_interval_months: 3
label_aliases:
  unit_codes: ["dizala"]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


class FakeStore:
    """In-memory stand-in for ElevatorStore."""

    def __init__(self, codes: list[str] | None = None) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.next_id = 1
        self.created: list[Record] = []
        self.fail_codes: set[str] = set()
        for code in codes or []:
            self.rows[code] = {"id": self._take_id(), "unit_code": code, "contract_number": None}

    def _take_id(self) -> int:
        i = self.next_id
        self.next_id += 1
        return i

    def find_by_unit_code(self, code: str) -> dict[str, Any] | None:
        return self.rows.get(code)

    def create_installation(self, record: Record) -> int:
        from elevator_import.db.store import StoreError

        if record.unit_code in self.fail_codes:
            raise StoreError(f"value too long for unit_code {record.unit_code}")
        i = self._take_id()
        self.rows[record.unit_code] = {"id": i, **record.to_row()}
        self.created.append(record)
        return i

    def delete_all_installations(self) -> int:
        n = len(self.rows)
        self.rows.clear()
        return n

    def count_installations(self, filter=None) -> int:
        return len(self.rows)


@pytest.fixture()
def fake_store() -> FakeStore:
    return FakeStore()


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else ("" if payload is None else str(payload))

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json body")
        return self._payload

    def raise_for_status(self) -> None:
        import requests

        if not self.ok:
            raise requests.HTTPError(f"status {self.status_code}")


class FakeSession:
    """Minimal requests.Session replacement routing the elevator endpoints."""

    def __init__(
        self,
        *,
        token: str | None = "tok-123",
        login_status: int = 200,
        elevators: list[dict[str, Any]] | None = None,
        reject_codes: set[str] | None = None,
        undeletable: set[str] | None = None,
    ) -> None:
        self.token = token
        self.login_status = login_status
        self.elevators = list(elevators or [])
        self.reject_codes = reject_codes or set()
        self.undeletable = undeletable or set()
        self.calls: list[tuple[str, str, Any]] = []
        self.created: list[dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, headers=None, json=None, timeout=None):
        self.calls.append(("POST", url, json))
        if url.endswith("/auth/login"):
            if self.login_status != 200:
                return FakeResponse(self.login_status, {"message": "Invalid credentials"})
            return FakeResponse(200, {"token": self.token} if self.token else {})
        if json["unitCode"] in self.reject_codes:
            return FakeResponse(422, None, text="validation failed: " + "x" * 400)
        self.created.append(json)
        self.elevators.append({"_id": f"id-{len(self.elevators) + 1}", **json})
        return FakeResponse(201, {"data": json})

    def get(self, url: str, headers=None, timeout=None):
        self.calls.append(("GET", url, None))
        return FakeResponse(200, {"data": list(self.elevators)})

    def delete(self, url: str, headers=None, timeout=None):
        self.calls.append(("DELETE", url, None))
        elevator_id = url.rsplit("/", 1)[-1]
        if elevator_id in self.undeletable:
            return FakeResponse(403, {"message": "Forbidden"})
        self.elevators = [e for e in self.elevators if e.get("_id") != elevator_id]
        return FakeResponse(200, {"message": "deleted"})

    def close(self) -> None:
        self.closed = True

    def mutating_calls(self) -> list[tuple[str, str, Any]]:
        return [
            c for c in self.calls
            if c[0] == "DELETE" or (c[0] == "POST" and not c[1].endswith("/auth/login"))
        ]


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def store_factory():
    return FakeStore


@pytest.fixture()
def session_factory():
    return FakeSession

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

import requests

from ..api.client import ApiError, ElevatorApiClient
from ..db.store import ElevatorStore, StoreError
from ..logging.error_log import (
    API_REJECTED,
    API_TRANSPORT_ERROR,
    DUPLICATE_UNIT_CODE,
    STORE_ERROR,
    WIPE_DELETE_FAILED,
)
from ..models.record import Record
from ..models.run_report import Outcome, WipeResult

"""Persistence sinks: where mapped Records end up.

Two interchangeable implementations behind the Sink protocol:

- DirectStoreSink: PostgreSQL table via ElevatorStore, skips unit codes that
  already exist
- RemoteApiSink:   REST service via ElevatorApiClient, best effort, keeps
  going after rejected records

``persist`` never raises for a single record; failures come back as
Outcome.ERROR / Outcome.SKIPPED and are reported to the optional
``on_failure(unit_code, error_type, message)`` callback so the caller can
write them to the error log.
"""

__all__ = [
    "Sink",
    "FailureCallback",
    "DirectStoreSink",
    "RemoteApiSink",
]

logger = logging.getLogger(__name__)

FailureCallback = Callable[[str, str, str], None]


class Sink(Protocol):
    mode: str

    def persist(self, record: Record) -> Outcome: ...

    def wipe(self, dry_run: bool) -> WipeResult: ...


class DirectStoreSink:
    """Write records straight into the local store.

    Dry-run performs the same duplicate lookups but never writes; codes that
    would be inserted are remembered so a repeated code later in the same
    file is reported as a skip, just as a real run would.
    """

    mode = "store"

    def __init__(
        self,
        store: ElevatorStore,
        *,
        dry_run: bool = False,
        on_failure: FailureCallback | None = None,
    ) -> None:
        self.store = store
        self.dry_run = dry_run
        self.on_failure = on_failure
        self._planned: set[str] = set()

    def _fail(self, code: str, error_type: str, message: str) -> None:
        if self.on_failure is not None:
            self.on_failure(code, error_type, message)

    def persist(self, record: Record) -> Outcome:
        code = record.unit_code
        try:
            existing = self.store.find_by_unit_code(code)
        except StoreError as e:
            logger.error(f"lookup failed {code}: {e}")
            self._fail(code, STORE_ERROR, str(e))
            return Outcome.ERROR

        if existing is not None or code in self._planned:
            logger.debug(f"duplicate unit code skipped: {code}")
            self._fail(code, DUPLICATE_UNIT_CODE, "unit code already exists")
            return Outcome.SKIPPED

        if self.dry_run:
            self._planned.add(code)
            return Outcome.INSERTED

        try:
            self.store.create_installation(record)
        except StoreError as e:
            logger.error(f"insert failed {code}: {e}")
            self._fail(code, STORE_ERROR, str(e))
            return Outcome.ERROR
        return Outcome.INSERTED

    def wipe(self, dry_run: bool) -> WipeResult:
        """Delete every installation (dry-run: count only).

        Store failures propagate; a failed wipe aborts the run before any
        record is processed.
        """
        if dry_run:
            total = self.store.count_installations()
            return WipeResult(deleted=0, total=total, dry_run=True)
        deleted = self.store.delete_all_installations()
        return WipeResult(deleted=deleted, total=deleted)


def _response_text(resp: Any, limit: int) -> str:
    return (resp.text or "")[:limit]


def _response_message(resp: Any) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"status {resp.status_code}"


class RemoteApiSink:
    """Send records to the REST service (client must already be logged in)."""

    mode = "api"

    def __init__(
        self,
        client: ElevatorApiClient,
        *,
        dry_run: bool = False,
        body_preview_chars: int = 300,
        on_failure: FailureCallback | None = None,
    ) -> None:
        self.client = client
        self.dry_run = dry_run
        self.body_preview_chars = body_preview_chars
        self.on_failure = on_failure
        self._sent: set[str] = set()  # この実行で送信済みのコード

    def _fail(self, code: str, error_type: str, message: str) -> None:
        if self.on_failure is not None:
            self.on_failure(code, error_type, message)

    def persist(self, record: Record) -> Outcome:
        code = record.unit_code
        if code in self._sent:
            logger.debug(f"unit code already sent in this run: {code}")
            self._fail(code, DUPLICATE_UNIT_CODE, "unit code repeated in input")
            return Outcome.SKIPPED
        if self.dry_run:
            self._sent.add(code)
            return Outcome.INSERTED

        try:
            resp = self.client.create_elevator(record.to_api_payload())
        except requests.RequestException as e:
            logger.error(f"API error {code}: {e}")
            self._fail(code, API_TRANSPORT_ERROR, str(e))
            return Outcome.ERROR

        if not resp.ok:
            body = _response_text(resp, self.body_preview_chars)
            logger.error(f"API insert failed {code} status={resp.status_code} body={body}")
            self._fail(code, API_REJECTED, f"status={resp.status_code} body={body}")
            return Outcome.ERROR

        self._sent.add(code)
        return Outcome.INSERTED

    def wipe(self, dry_run: bool) -> WipeResult:
        """Delete remote elevators one by one, tolerating single failures."""
        try:
            items = self.client.list_elevators()
        except ApiError as e:
            logger.warning(f"could not list elevators for wipe: {e}")
            return WipeResult(deleted=0, total=0, dry_run=dry_run, failed=True)

        total = len(items)
        if dry_run:
            return WipeResult(deleted=0, total=total, dry_run=True)

        deleted = 0
        for item in items:
            elevator_id = item.get("_id") or item.get("id")
            if not elevator_id:
                logger.warning(f"cannot delete elevator without id: {item!r}")
                self._fail("<unknown>", WIPE_DELETE_FAILED, "missing id")
                continue
            try:
                resp = self.client.delete_elevator(str(elevator_id))
            except requests.RequestException as e:
                logger.warning(f"cannot delete {elevator_id}: {e}")
                self._fail(str(elevator_id), WIPE_DELETE_FAILED, str(e))
                continue
            if resp.ok:
                deleted += 1
            else:
                message = _response_message(resp)
                logger.warning(f"cannot delete {elevator_id}: {message}")
                self._fail(str(elevator_id), WIPE_DELETE_FAILED, message)
        return WipeResult(deleted=deleted, total=total)

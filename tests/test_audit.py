"""Tests for the warning-override audit trail."""

from __future__ import annotations

import threading
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from unittest.mock import Mock, patch

import pytest
import requests

from repro_planner.services import audit
from repro_planner.services.audit import (
    PENDING_PATH,
    AuditContext,
    OverrideAuditTrail,
    OverrideLogClient,
    PendingOverride,
    idempotency_key,
    overrides_from_warnings,
)
from repro_planner.store import DataStore
from repro_planner.validation import Severity, ValidationWarning, WarningCode, WarningOverride

ACK_AT = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def _override(code: WarningCode = WarningCode.GESTATION_TOO_SHORT, field: str = "birth") -> WarningOverride:
    return WarningOverride(
        warning_code=code,
        field=field,
        acknowledged_at=ACK_AT,
        acknowledged_by="sam",
        message="Gestation of 50 days is shorter than the minimum",
        value_entered="2024-02-20",
    )


def _client(post_ok: bool | list[bool] = True) -> Mock:
    client = Mock(spec=OverrideLogClient)
    if isinstance(post_ok, list):
        client.post.side_effect = post_ok
    else:
        client.post.return_value = post_ok
    return client


class _PausingStore(DataStore):
    """Holds the first write until released."""

    def __init__(self, base_dir: Path) -> None:
        super().__init__(base_dir)
        self.entered = threading.Event()
        self.release = threading.Event()
        self.writes = 0

    def write(self, path: Path, data: Any, source: str, **params: Any) -> Path:
        self.writes += 1
        if self.writes == 1:
            self.entered.set()
            self.release.wait(5)
        return super().write(path, data, source, **params)


def _response(status: int = 200, body: Any = None) -> Mock:
    resp = Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.json.return_value = body
    if not resp.ok:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status}")
    return resp


class TestRecords:
    def test_idempotency_key(self) -> None:
        assert idempotency_key(77, _override()) == f"77:birth:GESTATION_TOO_SHORT:{ACK_AT.isoformat()}"

    def test_acknowledged_by(self) -> None:
        assert AuditContext(1, 2, user_name="sam").acknowledged_by == "sam"
        assert AuditContext(1, 2, user_id=9).acknowledged_by == "9"
        assert AuditContext(1, 2).acknowledged_by == "unknown"

    def test_overrides_from_warnings(self) -> None:
        warnings = [
            ValidationWarning(field="birth", code=WarningCode.GESTATION_TOO_SHORT, message="m1", severity=Severity.SERIOUS),
            ValidationWarning(field="birth", code=WarningCode.MISSING_INTERMEDIATE_ACTUAL, message="m2", severity=Severity.INFO),
        ]
        overrides = overrides_from_warnings(warnings, "birth", "2024-02-20", "sam", ACK_AT)

        assert [o.warning_code for o in overrides] == [
            WarningCode.GESTATION_TOO_SHORT,
            WarningCode.MISSING_INTERMEDIATE_ACTUAL,
        ]
        assert {o.acknowledged_at for o in overrides} == {ACK_AT}
        assert overrides[1].message == "m2"

    def test_pending_round_trip(self) -> None:
        item = PendingOverride("1", "77", _override(), "k", attempts=2, last_attempt=ACK_AT)
        assert PendingOverride.from_dict(item.to_dict()) == item


class TestRecord:
    """Best-effort writes with idempotency."""

    def test_success(self) -> None:
        client = _client(True)
        trail = OverrideAuditTrail(client)

        assert trail.record(_override(), 77, 1) is True
        assert trail.pending == []
        key = client.post.call_args.args[3]
        assert key == idempotency_key(77, _override())

    def test_repeat_after_success_is_noop(self) -> None:
        client = _client(True)
        trail = OverrideAuditTrail(client)

        trail.record(_override(), 77, 1)
        assert trail.record(_override(), 77, 1) is True
        assert client.post.call_count == 1

    def test_failure_queues(self) -> None:
        trail = OverrideAuditTrail(_client(False))

        assert trail.record(_override(), 77, 1) is False
        assert len(trail.pending) == 1
        assert trail.pending[0].plan_id == "77"
        assert trail.pending[0].attempts == 0

    def test_transport_error_queues(self) -> None:
        client = _client()
        client.post.side_effect = requests.ConnectionError("down")
        trail = OverrideAuditTrail(client)

        assert trail.record(_override(), 77, 1) is False
        assert len(trail.pending) == 1

    def test_same_key_queued_once(self) -> None:
        trail = OverrideAuditTrail(_client(False))
        trail.record(_override(), 77, 1)
        trail.record(_override(), 77, 1)
        assert len(trail.pending) == 1

    def test_in_flight_key_skipped(self) -> None:
        trail = OverrideAuditTrail(_client(True))
        trail._in_flight.add(idempotency_key(77, _override()))

        assert trail.record(_override(), 77, 1) is False
        trail.client.post.assert_not_called()

    def test_queue_bounded(self) -> None:
        trail = OverrideAuditTrail(_client(False), max_pending=2)
        for field in ("cycleStart", "breeding", "birth"):
            trail.record(_override(field=field), 77, 1)

        assert [p.override.field for p in trail.pending] == ["breeding", "birth"]

    def test_record_warnings(self) -> None:
        client = _client([True, False])
        trail = OverrideAuditTrail(client)
        warnings = [
            ValidationWarning(field="birth", code=WarningCode.GESTATION_TOO_SHORT, message="m1", severity=Severity.SERIOUS),
            ValidationWarning(field="birth", code=WarningCode.WEANING_TOO_EARLY, message="m2", severity=Severity.SERIOUS),
        ]
        ctx = AuditContext(tenant_id=1, plan_id=77, user_name="sam")

        assert trail.record_warnings(warnings, "birth", "2024-02-20", ctx, acknowledged_at=ACK_AT) == 1
        assert client.post.call_count == 2
        assert [p.override.warning_code for p in trail.pending] == [WarningCode.WEANING_TOO_EARLY]
        assert trail.pending[0].override.acknowledged_by == "sam"


class TestRetryPending:
    """Queued overrides are retried with their original key."""

    def test_success_removes(self) -> None:
        client = _client([False, True])
        trail = OverrideAuditTrail(client)
        trail.record(_override(), 77, 1)

        assert trail.retry_pending() == 1
        assert trail.pending == []
        first_key = client.post.call_args_list[0].args[3]
        retry_key = client.post.call_args_list[1].args[3]
        assert first_key == retry_key

    def test_failure_increments_attempts(self) -> None:
        trail = OverrideAuditTrail(_client(False))
        trail.record(_override(), 77, 1)

        assert trail.retry_pending() == 0
        assert trail.pending[0].attempts == 1

    def test_dropped_at_max_attempts(self) -> None:
        trail = OverrideAuditTrail(_client(False), max_attempts=2)
        trail.record(_override(), 77, 1)

        trail.retry_pending()
        assert len(trail.pending) == 1
        trail.retry_pending()
        assert trail.pending == []

    def test_empty_queue(self) -> None:
        client = _client(True)
        assert OverrideAuditTrail(client).retry_pending() == 0
        client.post.assert_not_called()


class TestPersistence:
    """Queue survives restarts through the store."""

    def test_queue_written_and_reloaded(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        OverrideAuditTrail(_client(False), store=store).record(_override(), 77, 1)

        reloaded = OverrideAuditTrail(_client(True), store=store)
        assert len(reloaded.pending) == 1
        assert reloaded.retry_pending() == 1
        assert store.read(PENDING_PATH) == []

    def test_corrupt_queue_discarded(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(PENDING_PATH, [{"nope": 1}], source="test")
        assert OverrideAuditTrail(_client(), store=store).pending == []

    def test_concurrent_failures_persist_full_queue(self, tmp_path: Path) -> None:
        store = _PausingStore(tmp_path)
        trail = OverrideAuditTrail(_client(False), store=store)
        first = threading.Thread(target=trail.record, args=(_override(), 77, 1))
        second = threading.Thread(
            target=trail.record, args=(_override(WarningCode.WEANING_TOO_EARLY, "weaning"), 77, 1)
        )

        first.start()
        assert store.entered.wait(5)
        second.start()
        deadline = time.monotonic() + 5
        while len(trail.pending) < 2 and time.monotonic() < deadline:
            time.sleep(0.01)
        store.release.set()
        first.join(5)
        second.join(5)

        on_disk = store.read(PENDING_PATH)
        assert len(on_disk) == 2
        assert [p["key"] for p in on_disk] == [p.key for p in trail.pending]


class TestFetchOverrides:
    """Reads go through the client; failures become []."""

    def test_fetch(self) -> None:
        client = _client()
        client.list.return_value = [_override()]
        trail = OverrideAuditTrail(client)

        assert trail.fetch_overrides(77, 1) == [_override()]
        assert trail.plan_has_overrides(77, 1) is True

    def test_fetch_failure(self) -> None:
        client = _client()
        client.list.side_effect = requests.ConnectionError("down")
        trail = OverrideAuditTrail(client)

        assert trail.fetch_overrides(77, 1) == []
        assert trail.plan_has_overrides(77, 1) is False


class TestOverrideLogClient:
    """HTTP shape of the override log."""

    def test_url(self) -> None:
        client = OverrideLogClient()
        assert client.url(77, 1) == "https://api.test/api/v1/tenants/1/breeding-plans/77/validation-overrides"

    @patch.object(audit, "session")
    def test_post_sends_idempotency_key(self, mock_session: Mock) -> None:
        mock_session.post.return_value = _response(201)

        assert OverrideLogClient().post(_override(), 77, 1, "k1") is True

        kwargs = mock_session.post.call_args.kwargs
        assert kwargs["headers"]["Idempotency-Key"] == "k1"
        assert kwargs["headers"]["x-tenant-id"] == "1"
        assert kwargs["json"]["warningCode"] == "GESTATION_TOO_SHORT"
        assert kwargs["json"]["valueEntered"] == "2024-02-20"

    @patch.object(audit, "session")
    def test_post_failure_status(self, mock_session: Mock) -> None:
        mock_session.post.return_value = _response(500)
        assert OverrideLogClient().post(_override(), 77, 1, "k1") is False

    @patch.object(audit, "session")
    def test_list_unwraps_data(self, mock_session: Mock) -> None:
        mock_session.get.return_value = _response(200, {"data": [_override().to_json_dict()]})
        assert OverrideLogClient().list(77, 1) == [_override()]

    @patch.object(audit, "session")
    def test_list_404_is_empty(self, mock_session: Mock) -> None:
        mock_session.get.return_value = _response(404)
        assert OverrideLogClient().list(77, 1) == []

    @patch.object(audit, "session")
    def test_list_error_raises(self, mock_session: Mock) -> None:
        mock_session.get.return_value = _response(500)
        with pytest.raises(requests.HTTPError):
            OverrideLogClient().list(77, 1)

"""Tests for the batch operations use case."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.surfsight.api.device_manager import BillingLookup, WriteResult
from src.surfsight.api.exceptions import (
    ConnectionError,
    InvalidInputError,
    TimeoutError,
    UpstreamRejectedError,
)
from src.surfsight.api.session import Session
from src.surfsight.batch.domain.entities import (
    BillingStatus,
    OperationKind,
    OperationRequest,
    OutcomeTag,
)
from src.surfsight.batch.use_cases import (
    BatchOperationsUseCase,
    check_billing_status,
    check_quality_level,
    clean_identifiers,
)


@pytest.fixture
def session():
    return Session(account_email="ops@example.com", bearer_token="tok", organization_id="org-1")


@pytest.fixture
def gateway():
    gw = AsyncMock()
    gw.lookup_billing_status.return_value = BillingLookup(status=200, billing_status_raw="activated")
    gw.set_billing_status.return_value = WriteResult(status=200, ok=True)
    gw.set_quality_level.return_value = WriteResult(status=200, ok=True)
    return gw


@pytest.fixture
def use_case(gateway):
    return BatchOperationsUseCase(gateway)


class TestInputChecks:
    """Tests for request shape checks."""

    @pytest.mark.parametrize("identifiers", [[], None, "357660101000198"])
    def test_identifiers_must_be_non_empty_list(self, identifiers):
        with pytest.raises(InvalidInputError) as exc_info:
            clean_identifiers(identifiers)
        assert exc_info.value.field == "imeis"

    @pytest.mark.parametrize("identifiers", [["1", ""], ["1", "   "], ["1", 2], ["x" * 33]])
    def test_bad_entries(self, identifiers):
        with pytest.raises(InvalidInputError):
            clean_identifiers(identifiers)

    def test_entries_are_stripped(self):
        assert clean_identifiers([" 1 ", "2"]) == ["1", "2"]

    @pytest.mark.parametrize("level", [2, 3, 4, 5, 6])
    def test_quality_level_in_range(self, level):
        assert check_quality_level(level) == level

    @pytest.mark.parametrize("level", [1, 7, 0, -1, "3", 3.0, True, None])
    def test_quality_level_rejected(self, level):
        with pytest.raises(InvalidInputError) as exc_info:
            check_quality_level(level)
        assert exc_info.value.message == "Quality level must be 1–5."

    def test_billing_status_coercion(self):
        assert check_billing_status("suspended") is BillingStatus.SUSPENDED
        assert check_billing_status(BillingStatus.DEACTIVATED) is BillingStatus.DEACTIVATED

    @pytest.mark.parametrize("status", [None, "", "activated", "SUSPENDED"])
    def test_billing_status_rejected(self, status):
        with pytest.raises(InvalidInputError):
            check_billing_status(status)


class TestValidate:
    """Tests for the per-device validate batch."""

    @pytest.mark.asyncio
    async def test_one_lookup_per_identifier_in_order(self, use_case, gateway, session):
        result = await use_case.validate(session, ["3", "1", "2"])

        assert [c.args[1] for c in gateway.lookup_billing_status.await_args_list] == ["3", "1", "2"]
        assert [r.identifier for r in result.records] == ["3", "1", "2"]
        assert all(r.found for r in result.records)
        assert result.kind == OperationKind.VALIDATE
        assert result.completed_at is not None

    @pytest.mark.asyncio
    async def test_duplicates_produce_duplicate_records(self, use_case, gateway, session):
        result = await use_case.validate(session, ["1", "1"])

        assert gateway.lookup_billing_status.await_count == 2
        assert len(result.records) == 2

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_batch(self, use_case, gateway, session):
        gateway.lookup_billing_status.side_effect = [
            BillingLookup(status=200, billing_status_raw="suspended"),
            BillingLookup(status=404),
            TimeoutError("timed out"),
            BillingLookup(status=403, message="Forbidden"),
            BillingLookup(status=200, billing_status_raw="deactivated"),
        ]

        result = await use_case.validate(session, ["a", "b", "c", "d", "e"])

        tags = [r.tag for r in result.records]
        assert tags == [
            OutcomeTag.OK,
            OutcomeTag.NOT_FOUND,
            OutcomeTag.FAILED,
            OutcomeTag.FAILED,
            OutcomeTag.OK,
        ]
        assert result.records[2].http_status == 0
        assert result.records[3].http_status == 403
        assert result.succeeded == 2
        assert result.not_found == 1
        assert result.failed == 2

    @pytest.mark.asyncio
    async def test_bad_input_makes_no_calls(self, use_case, gateway, session):
        with pytest.raises(InvalidInputError):
            await use_case.validate(session, [])

        gateway.lookup_billing_status.assert_not_awaited()


class TestSetBillingStatus:
    """Tests for the bulk billing batch."""

    @pytest.mark.asyncio
    async def test_single_call_for_all_identifiers(self, use_case, gateway, session):
        result = await use_case.set_billing_status(session, ["1", "2", "3"], "suspended")

        gateway.set_billing_status.assert_awaited_once_with(session, ["1", "2", "3"], "suspended")
        assert [r.identifier for r in result.records] == ["1", "2", "3"]
        assert all(r.ok for r in result.records)
        assert all(r.primary_detail == "suspended" for r in result.records)

    @pytest.mark.asyncio
    async def test_repeat_call_gives_same_results(self, use_case, gateway, session):
        first = await use_case.set_billing_status(session, ["1", "2"], "deactivated")
        second = await use_case.set_billing_status(session, ["1", "2"], "deactivated")

        assert first.to_dict()["results"] == second.to_dict()["results"]
        assert len(second.records) == 2
        assert gateway.set_billing_status.await_count == 2

    @pytest.mark.asyncio
    async def test_rejection_raises_with_upstream_status(self, use_case, gateway, session):
        gateway.set_billing_status.return_value = WriteResult(
            status=400, ok=False, message="Invalid IMEI in list"
        )

        with pytest.raises(UpstreamRejectedError) as exc_info:
            await use_case.set_billing_status(session, ["1", "2"], "deactivated")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Invalid IMEI in list"
        assert exc_info.value.method == "PUT"

    @pytest.mark.asyncio
    async def test_rejection_without_message(self, use_case, gateway, session):
        gateway.set_billing_status.return_value = WriteResult(status=502, ok=False)

        with pytest.raises(UpstreamRejectedError) as exc_info:
            await use_case.set_billing_status(session, ["1"], "suspended")

        assert exc_info.value.message == "SurfSight error (502)"

    @pytest.mark.asyncio
    async def test_transport_failure_propagates(self, use_case, gateway, session):
        gateway.set_billing_status.side_effect = ConnectionError("down")

        with pytest.raises(ConnectionError):
            await use_case.set_billing_status(session, ["1"], "suspended")

    @pytest.mark.asyncio
    async def test_invalid_status_makes_no_call(self, use_case, gateway, session):
        with pytest.raises(InvalidInputError):
            await use_case.set_billing_status(session, ["1"], "activated")

        gateway.set_billing_status.assert_not_awaited()


class TestSetQualityLevel:
    """Tests for the per-device quality batch."""

    @pytest.mark.asyncio
    async def test_one_call_per_identifier(self, use_case, gateway, session):
        result = await use_case.set_quality_level(session, ["1", "2"], 3)

        assert gateway.set_quality_level.await_count == 2
        gateway.set_quality_level.assert_any_await(session, "1", 3)
        gateway.set_quality_level.assert_any_await(session, "2", 3)
        assert all(r.primary_detail == "Level 2" for r in result.records)

    @pytest.mark.asyncio
    async def test_out_of_range_level_makes_no_calls(self, use_case, gateway, session):
        with pytest.raises(InvalidInputError):
            await use_case.set_quality_level(session, ["1", "2"], 7)

        gateway.set_quality_level.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failures_are_recorded(self, use_case, gateway, session):
        gateway.set_quality_level.side_effect = [
            WriteResult(status=200, ok=True),
            ConnectionError("down"),
            WriteResult(status=400, ok=False, message="Unsupported device"),
        ]

        result = await use_case.set_quality_level(session, ["a", "b", "c"], 2)

        assert [r.ok for r in result.records] == [True, False, False]
        assert result.records[1].http_status == 500
        assert result.records[2].primary_detail == "Unsupported device"


class TestExecute:
    """Tests for dispatch and per-session serialization."""

    @pytest.mark.asyncio
    async def test_dispatch(self, use_case, gateway, session):
        await use_case.execute(session, OperationRequest(OperationKind.VALIDATE, ["1"]))
        await use_case.execute(
            session, OperationRequest(OperationKind.BILLING, ["1"], BillingStatus.SUSPENDED)
        )
        await use_case.execute(session, OperationRequest(OperationKind.QUALITY, ["1"], 5))

        gateway.lookup_billing_status.assert_awaited_once()
        gateway.set_billing_status.assert_awaited_once()
        gateway.set_quality_level.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_batches_in_one_session_do_not_interleave(self, use_case, gateway, session):
        calls = []

        async def lookup(sess, imei):
            calls.append(("start", imei))
            await asyncio.sleep(0)
            calls.append(("end", imei))
            return BillingLookup(status=200, billing_status_raw="activated")

        gateway.lookup_billing_status.side_effect = lookup

        await asyncio.gather(
            use_case.validate(session, ["a1", "a2"]),
            use_case.validate(session, ["b1", "b2"]),
        )

        imeis = [imei for _, imei in calls]
        assert imeis == ["a1", "a1", "a2", "a2", "b1", "b1", "b2", "b2"]

import threading
import time

import pytest
from conftest import FakeOperation
from google.api_core.exceptions import NotFound

from skyforge.errors import (
    CancelledError,
    OperationError,
    OperationTimeoutError,
    ProviderError,
)
from skyforge.keys import global_key
from skyforge.operations import ComputeOperation, Failed, Pending, Succeeded
from skyforge.wait import OperationWaiter


def _extended_op(mocker, done, error_code=None, error_message=None):
    op = mocker.Mock()
    op.name = "operation-123"
    op.done.return_value = done
    op.error_code = error_code
    op.error_message = error_message
    return op


def test_compute_operation_states(mocker):
    pending = ComputeOperation(_extended_op(mocker, False), "network net")
    assert isinstance(pending.poll(), Pending)

    ok = ComputeOperation(_extended_op(mocker, True), "network net")
    assert isinstance(ok.poll(), Succeeded)

    failed = ComputeOperation(
        _extended_op(mocker, True, 400, "resource in use"), "network net"
    ).poll()
    assert isinstance(failed, Failed)
    assert failed.code == 400
    assert failed.message == "resource in use"


def test_wait_polls_until_done():
    op = FakeOperation([Pending(), Pending(), Succeeded()])
    OperationWaiter(timeout=5, interval=0).wait(op, "network net")
    assert op.polls == 3


def test_wait_surfaces_embedded_error():
    op = FakeOperation([Pending(), Failed(code=409, message="already exists")])
    with pytest.raises(OperationError) as exc_info:
        OperationWaiter(timeout=5, interval=0).wait(op, "network net")

    assert exc_info.value.code == 409
    assert exc_info.value.resource == "network net"
    assert "already exists" in str(exc_info.value)


def test_wait_times_out():
    op = FakeOperation([Pending()])
    with pytest.raises(OperationTimeoutError) as exc_info:
        OperationWaiter(timeout=0.05, interval=0.01).wait(op, "network net")

    assert not isinstance(exc_info.value, CancelledError)
    assert not isinstance(exc_info.value, OperationError)
    assert op.polls >= 1


def test_wait_when_already_cancelled():
    cancel = threading.Event()
    cancel.set()
    op = FakeOperation([Pending()])

    with pytest.raises(CancelledError):
        OperationWaiter(timeout=5, interval=0, cancel=cancel).wait(op, "network net")
    assert op.polls == 0


def test_cancel_interrupts_polling():
    cancel = threading.Event()
    op = FakeOperation([Pending()])

    # A long interval shows the sleep is interrupted rather than waited out
    waiter = OperationWaiter(timeout=60, interval=30, cancel=cancel)
    cancel_timer = threading.Timer(0.05, cancel.set)
    cancel_timer.start()
    started = time.monotonic()
    try:
        with pytest.raises(CancelledError):
            waiter.wait(op, "network net")
    finally:
        cancel_timer.cancel()

    assert time.monotonic() - started < 10
    assert op.polls <= 2


def test_run_skips_waiting_when_call_fails():
    def failing_call():
        raise ProviderError("failed to create network net", resource="network net")

    with pytest.raises(ProviderError):
        OperationWaiter(timeout=5, interval=0).run(failing_call, "network net")


def test_delete_tolerates_absence(mocker):
    client = mocker.Mock()
    client.delete.side_effect = NotFound("gone")
    waiter = OperationWaiter(timeout=5, interval=0)

    assert waiter.delete(client, global_key("net"), "network net") is False


def test_delete_waits_for_completion(mocker):
    op = FakeOperation([Pending(), Succeeded()])
    client = mocker.Mock()
    client.delete.return_value = op
    waiter = OperationWaiter(timeout=5, interval=0)

    assert waiter.delete(client, global_key("net"), "network net") is True
    assert op.polls == 2


def test_delete_operation_not_found_counts_as_absent(mocker):
    client = mocker.Mock()
    client.delete.return_value = FakeOperation([Failed(code=404, message="not found")])
    waiter = OperationWaiter(timeout=5, interval=0)

    assert waiter.delete(client, global_key("net"), "network net") is False


def test_delete_operation_failure_is_raised(mocker):
    client = mocker.Mock()
    client.delete.return_value = FakeOperation(
        [Failed(code=400, message="resource is in use by another resource")]
    )
    waiter = OperationWaiter(timeout=5, interval=0)

    with pytest.raises(OperationError):
        waiter.delete(client, global_key("net"), "network net")

from __future__ import annotations

import threading
from collections.abc import Callable

from google.api_core.exceptions import NotFound
from tenacity import (
    RetryError,
    Retrying,
    retry_if_result,
    stop_after_delay,
    stop_when_event_set,
    wait_fixed,
)

from .core import OPERATION_TIMEOUT, POLL_INTERVAL
from .errors import CancelledError, OperationError, OperationTimeoutError
from .keys import Key
from .logger import logger
from .operations import Failed, Operation, OperationResult, Pending
from .resources import ResourceClient


def _is_pending(result: OperationResult) -> bool:
    return isinstance(result, Pending)


class OperationWaiter:
    """
    Blocks until an operation is terminal.
    Polls every `interval` seconds for at most `timeout` seconds, and stops
    early when `cancel` is set.
    """

    def __init__(
        self,
        timeout: float = OPERATION_TIMEOUT,
        interval: float = POLL_INTERVAL,
        cancel: threading.Event | None = None,
    ) -> None:
        self.timeout = timeout
        self.interval = interval
        self.cancel = cancel or threading.Event()

    def wait(self, operation: Operation, resource: str) -> None:
        if self.cancel.is_set():
            raise CancelledError(resource)

        retryer = Retrying(
            retry=retry_if_result(_is_pending),
            stop=stop_after_delay(self.timeout) | stop_when_event_set(self.cancel),
            wait=wait_fixed(self.interval),
            # Sleeping on the event wakes the wait as soon as it is cancelled
            sleep=self.cancel.wait,
        )
        try:
            result = retryer(operation.poll)
        except RetryError:
            if self.cancel.is_set():
                raise CancelledError(resource) from None
            raise OperationTimeoutError(resource, self.timeout) from None

        if isinstance(result, Failed):
            raise OperationError(resource, result.code, result.message)
        logger.debug(f"Operation {operation.name} for {resource} completed")

    def run(self, call: Callable[[], Operation], resource: str) -> None:
        """Issues a mutating call and waits for it. A failed call is never waited on."""
        operation = call()
        self.wait(operation, resource)

    def delete(self, client: ResourceClient, key: Key, resource: str) -> bool:
        """
        Deletes and waits. Returns False when the resource was already gone.
        """
        try:
            operation = client.delete(key)
        except NotFound:
            logger.debug(f"{resource} already absent")
            return False
        try:
            self.wait(operation, resource)
        except OperationError as e:
            # The resource can disappear between the call and the operation
            if e.code == 404:
                return False
            raise
        return True

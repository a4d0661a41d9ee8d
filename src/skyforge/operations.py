"""
Long-running operation handles.

Every insert, patch and delete returns an operation. Polling one yields
Pending until the provider reports DONE, then Succeeded or Failed. A
Failed result carries the error embedded in the operation, which is
distinct from an error raised by the call itself.
"""

from __future__ import annotations

from typing import Any, Literal, Protocol

from google.api_core.exceptions import GoogleAPICallError
from pydantic import BaseModel, ConfigDict

from .errors import ProviderError


class Pending(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["pending"] = "pending"
    name: str = ""


class Succeeded(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["succeeded"] = "succeeded"
    name: str = ""


class Failed(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["failed"] = "failed"
    name: str = ""
    code: int | None = None
    message: str = ""


OperationResult = Pending | Succeeded | Failed


class Operation(Protocol):
    @property
    def name(self) -> str: ...

    def poll(self) -> OperationResult: ...


class ComputeOperation:
    """Wraps an ExtendedOperation returned by a compute_v1 client."""

    def __init__(self, operation: Any, resource: str) -> None:
        self._operation = operation
        self.resource = resource

    @property
    def name(self) -> str:
        return str(getattr(self._operation, "name", "") or "")

    def poll(self) -> OperationResult:
        try:
            # done() refreshes the operation from the server
            done = self._operation.done()
        except GoogleAPICallError as e:
            raise ProviderError(
                f"failed to poll operation {self.name} for {self.resource}: {e}",
                resource=self.resource,
            ) from e

        if not done:
            return Pending(name=self.name)

        code = self._operation.error_code
        if code:
            return Failed(
                name=self.name,
                code=int(code),
                message=str(self._operation.error_message or ""),
            )
        return Succeeded(name=self.name)

"""
Per-kind access to compute resources.

ResourceClient is the contract the reconcilers depend on. ComputeResourceClient
implements it over the generated compute_v1 clients, using a small table of
resource kinds to build the request fields for each call.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Generic, Protocol, TypeVar

from google.api_core.exceptions import GoogleAPICallError, NotFound
from pydantic import BaseModel, ConfigDict

from .clients import (
    get_firewalls_client,
    get_instances_client,
    get_networks_client,
    get_routers_client,
    get_routes_client,
    get_subnetworks_client,
)
from .errors import CancelledError, ProviderError
from .filters import Filter
from .keys import Key
from .operations import ComputeOperation, Operation

T = TypeVar("T")


class ResourceClient(Protocol[T]):
    def get(self, key: Key) -> T: ...

    def insert(self, key: Key, resource: T) -> Operation: ...

    def patch(self, key: Key, resource: T) -> Operation: ...

    def delete(self, key: Key) -> Operation: ...

    def list(self, fl: Filter | None = None) -> list[T]: ...


class ResourceKind(BaseModel):
    """How a kind is addressed by the compute API."""

    model_config = ConfigDict(frozen=True)

    name: str
    field: str
    scope: str = "global"


# field is the request argument naming the resource, e.g. `network=` / `network_resource=`
NETWORK = ResourceKind(name="network", field="network")
SUBNETWORK = ResourceKind(name="subnetwork", field="subnetwork", scope="regional")
ROUTER = ResourceKind(name="router", field="router", scope="regional")
FIREWALL = ResourceKind(name="firewall rule", field="firewall")
ROUTE = ResourceKind(name="route", field="route")
INSTANCE = ResourceKind(name="instance", field="instance", scope="zonal")


class ComputeResourceClient(Generic[T]):
    """A ResourceClient bound to one project and one resource kind."""

    def __init__(
        self,
        kind: ResourceKind,
        client: Any,
        project: str,
        cancel: threading.Event | None = None,
    ) -> None:
        self.kind = kind
        self.project = project
        self._client = client
        self._cancel = cancel or threading.Event()

    def describe(self, key: Key) -> str:
        return f"{self.kind.name} {key}"

    def _location(self, key: Key | None = None) -> dict[str, str]:
        args = {"project": self.project}
        if key is None:
            return args
        if key.scope != self.kind.scope:
            raise ValueError(f"{self.kind.name} needs a {self.kind.scope} key, got {key!r}")
        if key.region:
            args["region"] = key.region
        if key.zone:
            args["zone"] = key.zone
        return args

    def _call(self, action: str, resource: str, fn: Callable[[], Any]) -> Any:
        if self._cancel.is_set():
            raise CancelledError(resource)
        try:
            return fn()
        except NotFound:
            raise
        except GoogleAPICallError as e:
            raise ProviderError(f"failed to {action} {resource}: {e}", resource=resource) from e

    def get(self, key: Key) -> T:
        args = self._location(key)
        args[self.kind.field] = key.name
        return self._call("get", self.describe(key), lambda: self._client.get(**args))

    def insert(self, key: Key, resource: T) -> Operation:
        args: dict[str, Any] = self._location(key)
        args[f"{self.kind.field}_resource"] = resource
        op = self._call("create", self.describe(key), lambda: self._client.insert(**args))
        return ComputeOperation(op, self.describe(key))

    def patch(self, key: Key, resource: T) -> Operation:
        args: dict[str, Any] = self._location(key)
        args[self.kind.field] = key.name
        args[f"{self.kind.field}_resource"] = resource
        op = self._call("patch", self.describe(key), lambda: self._client.patch(**args))
        return ComputeOperation(op, self.describe(key))

    def delete(self, key: Key) -> Operation:
        args = self._location(key)
        args[self.kind.field] = key.name
        op = self._call("delete", self.describe(key), lambda: self._client.delete(**args))
        return ComputeOperation(op, self.describe(key))

    def list(self, fl: Filter | None = None) -> list[T]:
        request: dict[str, str] = self._location()
        if fl is not None:
            request["filter"] = str(fl)
        resource = f"{self.kind.name}s in project {self.project}"
        # The pager fetches further pages while iterating
        return self._call("list", resource, lambda: list(self._client.list(request=request)))


class ComputeClients:
    """The per-kind clients a cluster's reconcilers work with."""

    def __init__(
        self,
        networks: ResourceClient[Any],
        subnetworks: ResourceClient[Any],
        routers: ResourceClient[Any],
        firewalls: ResourceClient[Any],
        routes: ResourceClient[Any],
        instances: ResourceClient[Any],
    ) -> None:
        self.networks = networks
        self.subnetworks = subnetworks
        self.routers = routers
        self.firewalls = firewalls
        self.routes = routes
        self.instances = instances

    @classmethod
    def for_project(
        cls,
        project: str,
        network_project: str | None = None,
        cancel: threading.Event | None = None,
    ) -> ComputeClients:
        """
        network_project addresses the network and everything attached to it:
        subnetworks, router, routes and firewall rules.
        It differs from `project` only for shared VPC clusters.
        """
        host = network_project or project
        return cls(
            networks=ComputeResourceClient(NETWORK, get_networks_client(), host, cancel),
            subnetworks=ComputeResourceClient(
                SUBNETWORK, get_subnetworks_client(), host, cancel
            ),
            routers=ComputeResourceClient(ROUTER, get_routers_client(), host, cancel),
            firewalls=ComputeResourceClient(
                FIREWALL, get_firewalls_client(), host, cancel
            ),
            routes=ComputeResourceClient(ROUTE, get_routes_client(), host, cancel),
            instances=ComputeResourceClient(
                INSTANCE, get_instances_client(), project, cancel
            ),
        )

import pytest
from google.api_core.exceptions import NotFound
from google.cloud import compute_v1

from skyforge.keys import Key, global_key
from skyforge.operations import OperationResult, Succeeded
from skyforge.ownership import cluster_tag
from skyforge.resources import ComputeClients
from skyforge.schemas.cluster import ClusterSpec, NetworkSpec, SubnetSpec
from skyforge.scope import ClusterScope
from skyforge.wait import OperationWaiter

BASE_URL = "https://www.googleapis.com/compute/v1/projects/test-project"

MUTATIONS = {"insert", "patch", "delete"}


class FakeOperation:
    def __init__(self, results: list[OperationResult] | None = None) -> None:
        self.name = "operation-fake"
        self._results = list(results or [Succeeded(name=self.name)])
        self.polls = 0

    def poll(self) -> OperationResult:
        self.polls += 1
        if len(self._results) > 1:
            return self._results.pop(0)
        return self._results[0]


def _copy(resource):
    return type(resource).deserialize(type(resource).serialize(resource))


class FakeResourceClient:
    """In-memory ResourceClient. Every call is appended to a shared log."""

    def __init__(self, kind: str, collection: str, calls: list) -> None:
        self.kind = kind
        self.collection = collection
        self.calls = calls
        self.store: dict[Key, object] = {}
        self.errors: dict[str, BaseException] = {}
        self.operation_results: list[OperationResult] | None = None
        self.list_filters: list[str | None] = []

    def self_link(self, key: Key) -> str:
        if key.zone:
            location = f"zones/{key.zone}"
        elif key.region:
            location = f"regions/{key.region}"
        else:
            location = "global"
        return f"{BASE_URL}/{location}/{self.collection}/{key.name}"

    def add(self, key: Key, resource):
        if not resource.self_link:
            resource.self_link = self.self_link(key)
        self.store[key] = _copy(resource)
        return resource

    def _record(self, action: str, key: Key | None) -> None:
        self.calls.append((action, self.kind, key.name if key else None))
        if action in self.errors:
            raise self.errors.pop(action)

    def _operation(self) -> FakeOperation:
        return FakeOperation(self.operation_results)

    def get(self, key: Key):
        self._record("get", key)
        if key not in self.store:
            raise NotFound(f"{self.kind} {key} not found")
        return _copy(self.store[key])

    def insert(self, key: Key, resource):
        self._record("insert", key)
        created = _copy(resource)
        created.self_link = self.self_link(key)
        if self.kind == "instance":
            created.status = "RUNNING"
        self.store[key] = created
        return self._operation()

    def patch(self, key: Key, resource):
        self._record("patch", key)
        if key not in self.store:
            raise NotFound(f"{self.kind} {key} not found")
        self.store[key] = _copy(resource)
        return self._operation()

    def delete(self, key: Key):
        self._record("delete", key)
        if key not in self.store:
            raise NotFound(f"{self.kind} {key} not found")
        del self.store[key]
        return self._operation()

    def list(self, fl=None):
        self._record("list", None)
        self.list_filters.append(str(fl) if fl is not None else None)
        return [_copy(r) for r in self.store.values()]


def mutations(calls: list) -> list[tuple]:
    return [c for c in calls if c[0] in MUTATIONS]


@pytest.fixture
def calls():
    return []


@pytest.fixture
def clients(calls):
    return ComputeClients(
        networks=FakeResourceClient("network", "networks", calls),
        subnetworks=FakeResourceClient("subnetwork", "subnetworks", calls),
        routers=FakeResourceClient("router", "routers", calls),
        firewalls=FakeResourceClient("firewall", "firewalls", calls),
        routes=FakeResourceClient("route", "routes", calls),
        instances=FakeResourceClient("instance", "instances", calls),
    )


@pytest.fixture
def spec():
    return ClusterSpec(
        name="my-cluster",
        project="test-project",
        region="us-central1",
        network=NetworkSpec(
            name="my-network",
            auto_create_subnetworks=False,
            subnets=[SubnetSpec(name="my-subnet", cidr_block="10.0.0.0/24")],
        ),
    )


@pytest.fixture
def scope(spec, clients):
    return ClusterScope(spec, clients, waiter=OperationWaiter(timeout=5, interval=0))


@pytest.fixture
def owned_network(clients):
    """An existing custom mode network created for my-cluster."""
    return clients.networks.add(
        global_key("my-network"),
        compute_v1.Network(
            name="my-network",
            description=cluster_tag("my-cluster"),
            auto_create_subnetworks=False,
        ),
    )

from __future__ import annotations

import threading

from google.cloud import compute_v1

from .core import NAT_IP_ALLOCATE_OPTION, NAT_SOURCE_RANGES
from .keys import Key, global_key, regional_key
from .ownership import cluster_tag, nat_name, router_name
from .resources import ComputeClients
from .schemas.cluster import ClusterSpec, SubnetSpec
from .schemas.status import ClusterStatus
from .wait import OperationWaiter


class ClusterScope:
    """
    Everything one convergence cycle needs: the declared spec, the status
    written back to the caller, the provider clients and the waiter.
    Nothing here survives between cycles except what the caller keeps in
    `status`.
    """

    def __init__(
        self,
        spec: ClusterSpec,
        clients: ComputeClients,
        status: ClusterStatus | None = None,
        waiter: OperationWaiter | None = None,
    ) -> None:
        self.spec = spec
        self.clients = clients
        self.status = status if status is not None else ClusterStatus()
        self.waiter = waiter or OperationWaiter(
            timeout=spec.operation_timeout, interval=spec.poll_interval
        )

    @classmethod
    def from_spec(
        cls,
        spec: ClusterSpec,
        status: ClusterStatus | None = None,
        cancel: threading.Event | None = None,
    ) -> ClusterScope:
        cancel = cancel or threading.Event()
        clients = ComputeClients.for_project(
            spec.project, network_project=spec.network.host_project, cancel=cancel
        )
        waiter = OperationWaiter(
            timeout=spec.operation_timeout, interval=spec.poll_interval, cancel=cancel
        )
        return cls(spec, clients, status=status, waiter=waiter)

    # Identity

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def region(self) -> str:
        return self.spec.region

    @property
    def cluster_tag(self) -> str:
        return cluster_tag(self.spec.name)

    @property
    def is_shared_vpc(self) -> bool:
        return self.spec.shared_vpc

    @property
    def network_name(self) -> str:
        return self.spec.network.name

    @property
    def network_key(self) -> Key:
        return global_key(self.network_name)

    @property
    def router_name(self) -> str:
        return self.spec.router.name or router_name(self.network_name)

    @property
    def router_key(self) -> Key:
        return regional_key(self.router_name, self.region)

    def subnet_region(self, subnet: SubnetSpec) -> str:
        return subnet.region or self.region

    def subnet_key(self, subnet: SubnetSpec) -> Key:
        return regional_key(subnet.name, self.subnet_region(subnet))

    # Desired resources

    def network_spec(self) -> compute_v1.Network:
        network = compute_v1.Network(
            name=self.network_name,
            description=self.cluster_tag,
        )
        # Assigning the optional field marks it present, so an explicit False
        # is sent as custom mode rather than dropped as unset (legacy mode).
        auto = self.spec.network.auto_create_subnetworks
        network.auto_create_subnetworks = True if auto is None else auto
        return network

    def subnetwork_spec(self, subnet: SubnetSpec, network_self_link: str) -> compute_v1.Subnetwork:
        res = compute_v1.Subnetwork(
            name=subnet.name,
            region=self.subnet_region(subnet),
            ip_cidr_range=subnet.cidr_block,
            network=network_self_link,
            enable_flow_logs=subnet.enable_flow_logs,
        )
        if subnet.description:
            res.description = subnet.description
        return res

    def nat_spec(self) -> compute_v1.RouterNat:
        return compute_v1.RouterNat(
            name=nat_name(self.network_name),
            nat_ip_allocate_option=NAT_IP_ALLOCATE_OPTION,
            source_subnetwork_ip_ranges_to_nat=NAT_SOURCE_RANGES,
        )

    def nat_router_spec(self, network_self_link: str) -> compute_v1.Router:
        return compute_v1.Router(
            name=self.router_name,
            network=network_self_link,
            description=self.cluster_tag,
            nats=[self.nat_spec()],
        )

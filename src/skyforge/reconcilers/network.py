import re

from google.api_core.exceptions import NotFound
from google.cloud import compute_v1

from ..core import K8S_NODE_ROUTE_TAG
from ..errors import ConfigurationError
from ..filters import Filter
from ..keys import global_key
from ..logger import logger
from ..ownership import owned, resource_name_from_url
from ..schemas.cluster import SubnetSpec
from ..scope import ClusterScope


class NetworkReconciler:
    """
    Converges the network, its subnetworks and the Cloud NAT router.

    Creation runs network -> subnetworks -> router; deletion runs the other
    way round, with node routes removed before subnetworks since the
    provider refuses to delete a network that still has dependents.
    """

    def __init__(self, scope: ClusterScope) -> None:
        self.scope = scope
        self.clients = scope.clients
        self.waiter = scope.waiter

    def reconcile(self) -> None:
        logger.info(f"Reconciling network resources for cluster {self.scope.name}")
        network = self._create_or_get_network()
        status = self.scope.status.network
        status.self_link = network.self_link
        status.name = network.name
        status.auto_create_subnetworks = network.auto_create_subnetworks

        if not network.auto_create_subnetworks:
            # Custom mode
            for subnet in self.scope.spec.network.subnets:
                self._create_or_get_subnetwork(subnet, network.self_link)

        if owned(network.description, self.scope.name):
            router = self._create_or_get_router(network)
            status.router = router.self_link

    def delete(self) -> None:
        status = self.scope.status.network
        if self.scope.is_shared_vpc:
            logger.debug("Shared VPC enabled, leaving network resources in place")
            status.router = None
            status.self_link = None
            return

        logger.info(f"Deleting network resources for cluster {self.scope.name}")
        try:
            network = self.clients.networks.get(self.scope.network_key)
        except NotFound:
            logger.debug(f"Network {self.scope.network_name} already absent")
            status.router = None
            status.self_link = None
            return

        if not owned(network.description, self.scope.name):
            logger.warning(
                f"Network {network.name} is not owned by cluster {self.scope.name}, skipping delete"
            )
            return

        self._delete_router()
        self._delete_routes(network)
        if not network.auto_create_subnetworks:
            # Custom mode
            for subnet in self.scope.spec.network.subnets:
                key = self.scope.subnet_key(subnet)
                if self.waiter.delete(self.clients.subnetworks, key, f"subnetwork {key}"):
                    logger.info(f"Deleted subnetwork {subnet.name}")

        if self.waiter.delete(
            self.clients.networks, self.scope.network_key, f"network {network.name}"
        ):
            logger.info(f"Deleted network {network.name}")

        status.router = None
        status.self_link = None

    def _create_or_get_network(self) -> compute_v1.Network:
        key = self.scope.network_key
        logger.debug(f"Looking for network {key}")
        try:
            return self.clients.networks.get(key)
        except NotFound:
            pass

        if self.scope.is_shared_vpc:
            raise ConfigurationError(
                f"shared VPC is enabled but network {key.name} does not exist "
                f"in host project {self.scope.spec.network.host_project}"
            )

        self.waiter.run(
            lambda: self.clients.networks.insert(key, self.scope.network_spec()),
            f"network {key}",
        )
        network = self.clients.networks.get(key)
        logger.info(f"Created VPC network {network.name}")
        return network

    def _create_or_get_subnetwork(
        self, subnet: SubnetSpec, network_self_link: str
    ) -> compute_v1.Subnetwork:
        key = self.scope.subnet_key(subnet)
        logger.debug(f"Looking for subnetwork {key}")
        try:
            return self.clients.subnetworks.get(key)
        except NotFound:
            pass

        if self.scope.is_shared_vpc:
            raise ConfigurationError(
                f"shared VPC is enabled but subnetwork {key} does not exist"
            )

        spec = self.scope.subnetwork_spec(subnet, network_self_link)
        self.waiter.run(
            lambda: self.clients.subnetworks.insert(key, spec), f"subnetwork {key}"
        )
        subnetwork = self.clients.subnetworks.get(key)
        logger.info(f"Created subnetwork {subnet.name} in {key.region}")
        return subnetwork

    def _create_or_get_router(self, network: compute_v1.Network) -> compute_v1.Router:
        key = self.scope.router_key
        logger.debug(f"Looking for cloudnat router {key}")
        try:
            router = self.clients.routers.get(key)
        except NotFound:
            if self.scope.is_shared_vpc:
                raise ConfigurationError(
                    f"shared VPC is enabled but router {key} does not exist"
                ) from None
            spec = self.scope.nat_router_spec(network.self_link)
            self.waiter.run(
                lambda: self.clients.routers.insert(key, spec), f"router {key}"
            )
            router = self.clients.routers.get(key)
            logger.info(f"Created cloudnat router {router.name}")

        # One NAT config per router; an existing one is left as it is.
        if not router.nats:
            router.nats = [self.scope.nat_spec()]
            self.waiter.run(
                lambda: self.clients.routers.patch(key, router), f"router {key}"
            )
            logger.info(f"Attached cloud NAT to router {router.name}")

        return router

    def _delete_router(self) -> None:
        key = self.scope.router_key
        try:
            router = self.clients.routers.get(key)
        except NotFound:
            return

        if not owned(router.description, self.scope.name):
            logger.debug(f"Router {key} is not owned by cluster {self.scope.name}")
            return

        if self.waiter.delete(self.clients.routers, key, f"router {key}"):
            logger.info(f"Deleted router {router.name}")

    def _delete_routes(self, network: compute_v1.Network) -> None:
        fl = Filter.equals("description", K8S_NODE_ROUTE_TAG) & Filter.regexp(
            "network", f".*/{re.escape(network.name)}"
        )
        for route in self.clients.routes.list(fl):
            # The filter is a regexp, so check the reference exactly as well
            if resource_name_from_url(route.network) != network.name:
                continue
            key = global_key(route.name)
            if self.waiter.delete(self.clients.routes, key, f"route {route.name}"):
                logger.info(f"Deleted route {route.name}")

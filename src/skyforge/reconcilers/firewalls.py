from google.api_core.exceptions import NotFound
from google.cloud import compute_v1

from ..core import HEALTH_CHECK_SOURCE_RANGES
from ..errors import ConfigurationError, ProviderError
from ..keys import global_key
from ..logger import logger
from ..ownership import (
    cluster_rule_name,
    control_plane_tag,
    healthcheck_rule_name,
    node_tag,
    resource_name_from_url,
    tagged_for_cluster,
)
from ..scope import ClusterScope


def get_firewall_network_name(firewall: compute_v1.Firewall) -> str:
    """
    Returns the name of the network a firewall rule applies to.
    e.g. projects/myproject/global/networks/my-network -> my-network
    """
    try:
        return resource_name_from_url(firewall.network)
    except ValueError as e:
        raise ProviderError(
            f"failed to parse network url '{firewall.network}' for firewall {firewall.name}",
            resource=f"firewall rule {firewall.name}",
        ) from e


class FirewallReconciler:
    def __init__(self, scope: ClusterScope) -> None:
        self.scope = scope
        self.firewalls = scope.clients.firewalls
        self.waiter = scope.waiter

    def firewall_specs(self) -> list[compute_v1.Firewall]:
        """The fixed rule set every cluster gets."""
        name = self.scope.name
        network = self.scope.status.network.self_link
        if not network:
            raise ConfigurationError(
                f"network {self.scope.network_name} has no self link yet, "
                "reconcile the network before its firewall rules"
            )
        return [
            compute_v1.Firewall(
                name=healthcheck_rule_name(name),
                network=network,
                allowed=[
                    compute_v1.Allowed(
                        I_p_protocol="TCP",
                        ports=[str(self.scope.spec.load_balancer_backend_port)],
                    )
                ],
                direction="INGRESS",
                # Lets Google's health checkers reach the API servers
                source_ranges=list(HEALTH_CHECK_SOURCE_RANGES),
                target_tags=[control_plane_tag(name)],
            ),
            compute_v1.Firewall(
                name=cluster_rule_name(name),
                network=network,
                allowed=[compute_v1.Allowed(I_p_protocol="all")],
                direction="INGRESS",
                source_tags=[control_plane_tag(name), node_tag(name)],
                target_tags=[control_plane_tag(name), node_tag(name)],
            ),
        ]

    def reconcile(self) -> None:
        logger.info(f"Reconciling firewall rules for cluster {self.scope.name}")
        rules = self.scope.status.network.firewall_rules
        for spec in self.firewall_specs():
            key = global_key(spec.name)
            try:
                firewall = self.firewalls.get(key)
            except NotFound:
                self.waiter.run(
                    lambda: self.firewalls.insert(key, spec), f"firewall rule {key}"
                )
                firewall = self.firewalls.get(key)
                logger.info(f"Created firewall rule {firewall.name}")

            rules[firewall.name] = firewall.self_link

    def delete(self) -> None:
        logger.info(f"Deleting firewall rules for cluster {self.scope.name}")
        rules = self.scope.status.network.firewall_rules
        for name in list(rules):
            key = global_key(name)
            if self.waiter.delete(self.firewalls, key, f"firewall rule {name}"):
                logger.info(f"Deleted firewall rule {name}")
            del rules[name]

        self._sweep()

    def _sweep(self) -> None:
        """
        Deletes rules on the cluster network that target the cluster but are
        not tracked in status, e.g. rules written by earlier versions.
        """
        cluster_name = self.scope.name
        network_name = self.scope.network_name
        for firewall in self.firewalls.list():
            if get_firewall_network_name(firewall) != network_name:
                continue
            if not tagged_for_cluster(firewall.target_tags, cluster_name):
                continue
            if self.waiter.delete(
                self.firewalls, global_key(firewall.name), f"firewall rule {firewall.name}"
            ):
                logger.info(f"Deleted stale firewall rule {firewall.name}")

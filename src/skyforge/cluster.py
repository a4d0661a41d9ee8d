from .logger import logger
from .reconcilers.bastion import BastionReconciler
from .reconcilers.firewalls import FirewallReconciler
from .reconcilers.network import NetworkReconciler
from .scope import ClusterScope


def reconcile_cluster(scope: ClusterScope) -> None:
    """
    Runs one convergence cycle.
    The network goes first: firewall rules and the bastion need its self link.
    """
    NetworkReconciler(scope).reconcile()
    FirewallReconciler(scope).reconcile()
    if scope.spec.bastion.enabled:
        BastionReconciler(scope).reconcile()
    logger.info(f"Cluster {scope.name} reconciled")


def delete_cluster(scope: ClusterScope) -> None:
    """
    Tears a cluster down. Instances and firewall rules reference the network,
    so they go before it.
    """
    BastionReconciler(scope).delete()
    FirewallReconciler(scope).delete()
    NetworkReconciler(scope).delete()
    logger.info(f"Cluster {scope.name} deleted")

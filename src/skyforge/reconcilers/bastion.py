from google.api_core.exceptions import NotFound
from google.cloud import compute_v1

from ..core import CLOUD_PLATFORM_SCOPE
from ..keys import Key, zonal_key
from ..logger import logger
from ..ownership import bastion_name, bastion_tag, bastion_zone, owned
from ..scope import ClusterScope


class BastionReconciler:
    """Manages the single bastion host of a cluster that owns its network."""

    def __init__(self, scope: ClusterScope) -> None:
        self.scope = scope
        self.clients = scope.clients
        self.waiter = scope.waiter

    @property
    def key(self) -> Key:
        return zonal_key(bastion_name(self.scope.name), bastion_zone(self.scope.region))

    def _owned_network(self) -> compute_v1.Network | None:
        """Bastions only live on networks this cluster owns."""
        try:
            network = self.clients.networks.get(self.scope.network_key)
        except NotFound:
            return None
        if not owned(network.description, self.scope.name):
            return None
        return network

    def instance_spec(self, network_self_link: str) -> compute_v1.Instance:
        spec = self.scope.spec.bastion
        zone = self.key.zone
        return compute_v1.Instance(
            name=self.key.name,
            zone=zone,
            machine_type=f"zones/{zone}/machineTypes/{spec.machine_type}",
            can_ip_forward=True,
            network_interfaces=[
                compute_v1.NetworkInterface(
                    network=network_self_link,
                    access_configs=[
                        compute_v1.AccessConfig(
                            type_="ONE_TO_ONE_NAT",
                            name="External NAT",
                        )
                    ],
                )
            ],
            # Firewall rules for SSH target this tag
            tags=compute_v1.Tags(items=[bastion_tag(self.scope.name)]),
            disks=[
                compute_v1.AttachedDisk(
                    auto_delete=True,
                    boot=True,
                    initialize_params=compute_v1.AttachedDiskInitializeParams(
                        disk_size_gb=spec.disk_size_gb,
                        disk_type=f"zones/{zone}/diskTypes/{spec.disk_type}",
                        source_image=spec.image,
                    ),
                )
            ],
            metadata=compute_v1.Metadata(),
            service_accounts=[
                compute_v1.ServiceAccount(
                    email="default",
                    scopes=[CLOUD_PLATFORM_SCOPE],
                )
            ],
        )

    def reconcile(self) -> None:
        network = self._owned_network()
        if network is None:
            logger.debug(f"No owned network for cluster {self.scope.name}, skipping bastion")
            return

        logger.debug("Reconciling bastion host")
        key = self.key
        try:
            instance = self.clients.instances.get(key)
        except NotFound:
            spec = self.instance_spec(network.self_link)
            self.waiter.run(
                lambda: self.clients.instances.insert(key, spec), f"instance {key}"
            )
            instance = self.clients.instances.get(key)
            logger.info(f"Created new bastion host {instance.self_link}")

        status = self.scope.status.bastion
        status.self_link = instance.self_link
        status.instance_status = str(instance.status)

    def delete(self) -> None:
        if self._owned_network() is None:
            return

        key = self.key
        if self.waiter.delete(self.clients.instances, key, f"instance {key}"):
            logger.info(f"Terminated bastion instance {key.name}")
        else:
            logger.debug("Bastion instance does not exist")

        status = self.scope.status.bastion
        status.self_link = None
        status.instance_status = None

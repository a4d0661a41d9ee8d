from pydantic import BaseModel, Field

from ..core import (
    BASTION_DISK_SIZE_GB,
    BASTION_DISK_TYPE,
    BASTION_IMAGE,
    BASTION_MACHINE_TYPE,
    DEFAULT_APISERVER_PORT,
    OPERATION_TIMEOUT,
    POLL_INTERVAL,
)


class SubnetSpec(BaseModel):
    name: str
    cidr_block: str
    region: str | None = Field(default=None, description="Defaults to the cluster region")
    enable_flow_logs: bool = False
    description: str | None = None


class NetworkSpec(BaseModel):
    name: str = "default"
    auto_create_subnetworks: bool | None = Field(
        default=None,
        description="None creates an auto mode network, False a custom mode one",
    )
    subnets: list[SubnetSpec] = Field(default_factory=list)
    host_project: str | None = Field(
        default=None, description="Shared VPC host project owning the network"
    )


class RouterSpec(BaseModel):
    name: str | None = Field(default=None, description="Defaults to <network>-router")


class BastionSpec(BaseModel):
    enabled: bool = False
    machine_type: str = BASTION_MACHINE_TYPE
    image: str = BASTION_IMAGE
    disk_size_gb: int = BASTION_DISK_SIZE_GB
    disk_type: str = BASTION_DISK_TYPE


class ClusterSpec(BaseModel):
    name: str
    project: str
    region: str
    network: NetworkSpec = Field(default_factory=NetworkSpec)
    router: RouterSpec = Field(default_factory=RouterSpec)
    bastion: BastionSpec = Field(default_factory=BastionSpec)
    load_balancer_backend_port: int = DEFAULT_APISERVER_PORT
    operation_timeout: float = OPERATION_TIMEOUT
    poll_interval: float = POLL_INTERVAL

    @property
    def shared_vpc(self) -> bool:
        return bool(self.network.host_project)

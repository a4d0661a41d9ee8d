from pydantic import BaseModel, Field


class NetworkStatus(BaseModel):
    name: str | None = None
    auto_create_subnetworks: bool | None = None
    self_link: str | None = None
    router: str | None = Field(default=None, description="Self link of the NAT router")
    firewall_rules: dict[str, str] = Field(
        default_factory=dict, description="Rule name -> self link"
    )


class BastionStatus(BaseModel):
    self_link: str | None = None
    instance_status: str | None = Field(
        default=None, description="e.g. PROVISIONING, RUNNING, TERMINATED"
    )


class ClusterStatus(BaseModel):
    network: NetworkStatus = Field(default_factory=NetworkStatus)
    bastion: BastionStatus = Field(default_factory=BastionStatus)

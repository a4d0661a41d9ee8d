from pydantic import BaseModel, ConfigDict


class Key(BaseModel):
    """Addresses a compute resource: global (name), regional or zonal."""

    model_config = ConfigDict(frozen=True)

    name: str
    region: str | None = None
    zone: str | None = None

    @property
    def scope(self) -> str:
        if self.zone:
            return "zonal"
        if self.region:
            return "regional"
        return "global"

    def __str__(self) -> str:
        if self.zone:
            return f"zones/{self.zone}/{self.name}"
        if self.region:
            return f"regions/{self.region}/{self.name}"
        return self.name


def global_key(name: str) -> Key:
    return Key(name=name)


def regional_key(name: str, region: str) -> Key:
    return Key(name=name, region=region)


def zonal_key(name: str, zone: str) -> Key:
    return Key(name=name, zone=zone)

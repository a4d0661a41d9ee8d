from __future__ import annotations

from functools import lru_cache
from typing import Any

from google.cloud import compute_v1

# Shared Client Registry (Lazy-loaded and cached)


@lru_cache(maxsize=1)
def get_networks_client() -> Any:
    return compute_v1.NetworksClient()


@lru_cache(maxsize=1)
def get_subnetworks_client() -> Any:
    return compute_v1.SubnetworksClient()


@lru_cache(maxsize=1)
def get_routers_client() -> Any:
    return compute_v1.RoutersClient()


@lru_cache(maxsize=1)
def get_firewalls_client() -> Any:
    return compute_v1.FirewallsClient()


@lru_cache(maxsize=1)
def get_routes_client() -> Any:
    return compute_v1.RoutesClient()


@lru_cache(maxsize=1)
def get_instances_client() -> Any:
    return compute_v1.InstancesClient()

"""
Ownership checks and the names derived from a cluster.

Every resource the reconcilers create carries the cluster tag, either as
its description or as one of its tags. Nothing is deleted or adopted
unless that tag matches.
"""

import posixpath
from collections.abc import Iterable
from urllib.parse import urlparse

from .core import APISERVER_ROLE, CLUSTER_TAG_PREFIX


def cluster_tag(cluster_name: str) -> str:
    return f"{CLUSTER_TAG_PREFIX}{cluster_name}"


def owned(description_or_tags: str | Iterable[str] | None, cluster_name: str) -> bool:
    """
    True when a description equals the cluster tag, or a tag list contains it.
    """
    if not description_or_tags:
        return False
    tag = cluster_tag(cluster_name)
    if isinstance(description_or_tags, str):
        return description_or_tags == tag
    return tag in description_or_tags


def tagged_for_cluster(target_tags: Iterable[str] | None, cluster_name: str) -> bool:
    """Firewall rules written for a cluster target the bare cluster name."""
    return cluster_name in (target_tags or [])


def resource_name_from_url(url: str | None) -> str:
    """
    Returns the last path segment of a resource reference.
    e.g. projects/myproject/global/networks/my-network -> my-network
    """
    if not url:
        return ""
    path = urlparse(url).path.rstrip("/")
    return posixpath.basename(path)


def router_name(network_name: str) -> str:
    return f"{network_name}-router"


def nat_name(network_name: str) -> str:
    return f"{network_name}-nat"


def bastion_name(cluster_name: str) -> str:
    return f"{cluster_name}-bastion"


def bastion_zone(region: str) -> str:
    return f"{region}-a"


def bastion_tag(cluster_name: str) -> str:
    return f"{cluster_name}-bastion"


def control_plane_tag(cluster_name: str) -> str:
    return f"{cluster_name}-control-plane"


def node_tag(cluster_name: str) -> str:
    return f"{cluster_name}-node"


def healthcheck_rule_name(cluster_name: str) -> str:
    return f"allow-{cluster_name}-{APISERVER_ROLE}-healthchecks"


def cluster_rule_name(cluster_name: str) -> str:
    return f"allow-{cluster_name}-{APISERVER_ROLE}-cluster"

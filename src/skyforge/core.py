# Operation polling defaults
# usage: OperationWaiter(timeout=OPERATION_TIMEOUT, interval=POLL_INTERVAL)
OPERATION_TIMEOUT = 300.0
POLL_INTERVAL = 2.0

# Description tag that kube-controller-manager puts on per-node routes
K8S_NODE_ROUTE_TAG = "k8s-node-route"

# Ownership tags are this prefix followed by the cluster name.
CLUSTER_TAG_PREFIX = "sigs.k8s.io/cluster-api-provider-gcp/cluster/"

# Role value used in the names of the default firewall rules
APISERVER_ROLE = "apiserver"

DEFAULT_APISERVER_PORT = 6443

# Google's load balancer health check ranges
# https://cloud.google.com/load-balancing/docs/health-checks#fw-rule
HEALTH_CHECK_SOURCE_RANGES = [
    "35.191.0.0/16",
    "130.211.0.0/22",
]

# Cloud NAT settings: auto-allocated external IPs for every range of every subnet
NAT_IP_ALLOCATE_OPTION = "AUTO_ONLY"
NAT_SOURCE_RANGES = "ALL_SUBNETWORKS_ALL_IP_RANGES"

# Bastion defaults
BASTION_MACHINE_TYPE = "f1-micro"
BASTION_IMAGE = "projects/ubuntu-os-cloud/global/images/family/ubuntu-minimal-2204-lts"
BASTION_DISK_SIZE_GB = 10
BASTION_DISK_TYPE = "pd-standard"
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"

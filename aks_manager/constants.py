# /*
# Copyright 2026 The AKS Manager Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Defaults, resource names, and fixed values shared by the tools."""

from __future__ import annotations

MIN_AZURE_CLI_VERSION = "2.60.0"
DEFAULT_KUBECONFIG_NAME = "cluster.config"

# -- Required tools --
AKS_REQUIRED_TOOLS = ("az", "kubectl")
SCHEDULER_REQUIRED_TOOLS = ("az", "kubectl")
HUB_SPOKE_REQUIRED_TOOLS = ("az", "kubectl", "ssh", "scp", "jq")

# -- Resource providers --
PROVIDER_COMPUTE = "Microsoft.Compute"
PROVIDER_CONTAINER_SERVICE = "Microsoft.ContainerService"
PROVIDER_NETWORK = "Microsoft.Network"
CLUSTER_PROVIDERS = (PROVIDER_COMPUTE, PROVIDER_CONTAINER_SERVICE, PROVIDER_NETWORK)
FEATURE_SCHEDULER_CONFIGURATION = "UserDefinedSchedulerConfigurationPreview"

# -- aks tool defaults --
DEFAULT_AKS_LOCATION = "westus3"
DEFAULT_AKS_RESOURCE_GROUP = "rg-aks"
DEFAULT_AKS_CLUSTER = "aks-cluster"
DEFAULT_AKS_KUBERNETES_VERSION = "1.33"
DEFAULT_NODE_COUNT = 1
AKS_VNET_NAME = "aks-vnet"
AKS_VNET_PREFIX = "10.0.0.0/8"
AKS_SUBNET_NAME = "aks-subnet"
AKS_SUBNET_PREFIX = "10.1.0.0/16"

# -- scheduler tool defaults --
DEFAULT_SCHEDULER_LOCATION = "eastus2"
DEFAULT_SCHEDULER_RESOURCE_GROUP = "rg-aks"
DEFAULT_SCHEDULER_CLUSTER = "aks-cluster"
DEFAULT_GPU_POOL_NAME = "gpunp"
DEFAULT_GPU_VM_SIZE = "Standard_NC40ads_H100_v5"
DEFAULT_GPU_ZONES = "1"
SCHEDULER_CONFIG_API_VERSION = "aks.azure.com/v1alpha1"
SCHEDULER_CONFIG_KIND = "SchedulerConfiguration"
SCHEDULER_CONFIG_NAME = "upstream"
KUBE_SCHEDULER_API_VERSION = "kubescheduler.config.k8s.io/v1"
PROFILE_BIN_PACK_CPU = "bin-pack-cpu-scheduler.yaml"
PROFILE_POD_TOPOLOGY_SPREAD = "pod-topology-spreader-scheduler.yaml"
PROFILE_BIN_PACK_GPU = "bin-pack-gpu-scheduler.yaml"
DEFAULT_SCHEDULER_CONFIG = PROFILE_BIN_PACK_CPU
LABEL_TOPOLOGY_ZONE = "topology.kubernetes.io/zone"
RESOURCE_GPU = "nvidia.com/gpu"

# -- hub-spoke tool defaults --
DEFAULT_HUB_SPOKE_LOCATION = "westus3"
DEFAULT_HUB_SPOKE_RESOURCE_GROUP = "rg-aks-fw-test"
DEFAULT_HUB_SPOKE_CLUSTER = "aks-fw-test"
DEFAULT_HUB_SPOKE_KUBERNETES_VERSION = "1.32"
DEFAULT_HUB_VNET_NAME = "hub-vnet"
DEFAULT_HUB_VNET_PREFIX = "10.0.0.0/16"
DEFAULT_NVA_SUBNET_PREFIX = "10.0.2.0/24"
DEFAULT_SPOKE_VNET_NAME = "spoke-vnet"
DEFAULT_SPOKE_VNET_PREFIX = "10.1.0.0/16"
DEFAULT_AKS_SUBNET_PREFIX = "10.1.0.0/24"
DEFAULT_NVA_NAME = "freebsd-nva"
DEFAULT_NVA_IMAGE = "thefreebsdfoundation:freebsd-14_2:14_2-release-amd64-gen2-zfs:14.2.0"
DEFAULT_NVA_SIZE = "Standard_B2ms"
DEFAULT_NVA_ADMIN_USER = "azureuser"
DEFAULT_NVA_BOOT_WAIT_SECONDS = 30
DEFAULT_TEST_POD_WAIT_SECONDS = 10
NVA_SUBNET_NAME = "nva-subnet"
HUB_SPOKE_NODE_VM_SIZE = "Standard_B2ms"
VNET_ADDRESS_SPACE = "10.0.0.0/8"
ROUTE_TABLE_NAME = "aks-rt"
DEFAULT_ROUTE_NAME = "default-route"
DEFAULT_ROUTE_PREFIX = "0.0.0.0/0"
PEERING_HUB_TO_SPOKE = "hub-to-spoke"
PEERING_SPOKE_TO_HUB = "spoke-to-hub"
DNS_LINK_NAME = "hub-vnet-link"
NVA_EXTERNAL_INTERFACE = "hn0"
NVA_PF_CONF_PATH = "/etc/pf.conf"
NVA_REMOTE_KUBECONFIG = "~/kubeconfig"
SSH_NO_HOST_KEY_CHECK = ("-o", "StrictHostKeyChecking=no")

# -- Connectivity probe --
TEST_POD_NAME = "test-icmp"
TEST_POD_IMAGE = "alpine"
PING_TARGET = "8.8.8.8"
OUTBOUND_IP_URL = "ifconfig.me/ip"

# -- appcat tool --
DEFAULT_RULESETS_SUBDIR = ".appcat/rulesets"
APPCAT_OBSOLETE_RULESETS = (
    "camel3", "camel4", "droolsjbpm", "eap6", "eap7", "eap8", "eapxp", "eapxp6",
    "fuse", "fuse-service-works", "hibernate", "jakarta-ee9", "jws6", "openliberty",
    "openjdk7", "openjdk8", "openjdk11", "quarkus", "rhr", "os",
)
APPCAT_OBSOLETE_RULES: dict[str, tuple[tuple[str, ...], str]] = {
    "azure": (
        (
            "01-azure-aws-config.yaml",
            "11-azure-tas-binding.yaml",
            "12-eap-to-azure-appservice-datasource-driver.yaml",
            "13-eap-to-azure-appservice-pom.yaml",
            "14-jetty-to-azure-external-resources.yaml",
            "22-tomcat-to-azure-external-resources.yaml",
            "29-openliberty-database.yaml",
            "30-openliberty-filesystem.yaml",
            "31-openliberty-jms.yaml",
            "32-openliberty-logging.yaml",
            "34-jakartaee-version-upgrade.yaml",
        ),
        "AWS, EAP, Jetty, Tomcat, OpenLiberty, JakartaEE rules",
    ),
    "cloud-readiness": (
        (
            "02-java-corba.yaml",
            "03-java-rmi.yaml",
            "04-java-rpc.yaml",
            "05-jca.yaml",
            "06-jni-native-code.yaml",
            "17-webform-auth.yaml",
            "18-windows-registry.yaml",
        ),
        "CORBA, RMI, RPC, JCA, JNI, WebForm, Windows registry rules",
    ),
    "technology-usage": (
        (
            "18-jta-technology-usage.yaml",
            "21-javaee-technology-usage.yaml",
            "28-ejb-technology-usage.yaml",
            "199-ejb.yaml",
            "209-jta.yaml",
        ),
        "EJB, Java EE, JTA rules",
    ),
}

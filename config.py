"""
Configuration management for the GKE stack deployment
"""

import pulumi
from typing import Any, Dict, List, Optional

from modules.stack.errors import StackConfigError
from modules.stack.types import Allocation, ContainerSpec, ExtraPort, Sidecar, StackConfig


def _allocation(raw: Optional[Dict[str, Any]]) -> Optional[Allocation]:
    if not raw:
        return None
    return Allocation(request=raw.get("request"), limit=raw.get("limit"))


def count_or_percent(raw: Optional[str]) -> Optional[Any]:
    """Parse "2" as 2 and keep "50%" as is"""
    if raw is None:
        return None
    raw = raw.strip()
    return raw if raw.endswith("%") else int(raw)


def parse_container(raw: Dict[str, Any]) -> ContainerSpec:
    """Build the main container spec from its config object"""
    raw = raw or {}
    return ContainerSpec(
        image=raw.get("image"),
        port=raw.get("port"),
        cpu=_allocation(raw.get("cpu")),
        memory=_allocation(raw.get("memory")),
        env=dict(raw.get("env") or {}),
        command=raw.get("command"),
        args=raw.get("args"),
    )


def _require(item: Dict[str, Any], key: str, what: str, stack_name: Optional[str]) -> Any:
    if item.get(key) is None:
        raise StackConfigError(stack_name, f"{what} entry {item!r} is missing '{key}'")
    return item[key]


def parse_sidecars(raw: Optional[List[Dict[str, Any]]], stack_name: str = None) -> List[Sidecar]:
    """Build sidecar specs from their config objects"""
    return [
        Sidecar(
            name=_require(item, "name", "Sidecar", stack_name),
            image=_require(item, "image", "Sidecar", stack_name),
            port=item.get("port"),
            cpu=_allocation(item.get("cpu")),
            memory=_allocation(item.get("memory")),
            env=dict(item.get("env") or {}),
            command=item.get("command"),
            args=item.get("args"),
        )
        for item in raw or []
    ]


def parse_extra_ports(raw: Optional[List[Dict[str, Any]]], stack_name: str = None) -> List[ExtraPort]:
    """Build extra port specs from their config objects"""
    return [
        ExtraPort(
            name=_require(item, "name", "Extra port", stack_name),
            port=_require(item, "port", "Extra port", stack_name),
            protocol=item.get("protocol") or "TCP",
        )
        for item in raw or []
    ]


class Config:
    """Centralized configuration management for the GKE stack"""

    def __init__(self):
        self.config = pulumi.Config()

        # Stack identity
        self.stack_name = self.config.get("name") or pulumi.get_project()

        # Exposure
        self.domain = self.config.get("domain")
        self.dns_zone_name = self.config.get("dns_zone_name")

        # Workload
        self.container = self.config.get_object("container") or {}
        self.sidecars = self.config.get_object("sidecars") or []
        self.extra_ports = self.config.get_object("extra_ports") or []
        self.replicas = self.config.get_int("replicas")
        self.strategy = self.config.get_object("strategy")

        # Service
        self.service_port = self.config.get_int("service_port")

        # Health checks
        self.liveness_path = self.config.get("liveness_path")
        self.readiness_path = self.config.get("readiness_path")
        self.liveness_probe = self.config.get_object("liveness_probe")
        self.readiness_probe = self.config.get_object("readiness_probe")

        # Availability; either bound may be a count or a percentage string
        self.min_available = count_or_percent(self.config.get("min_available"))
        self.max_unavailable = count_or_percent(self.config.get("max_unavailable"))

        # Cluster access
        self.existing_namespace = self.config.get("existing_namespace")
        self.kubeconfig = self.config.get("kubeconfig")

        # Additional labels
        self.additional_labels = self.config.get_object("labels") or {}

    @property
    def common_labels(self) -> Dict[str, str]:
        """Get common labels for all resources"""
        base_labels = {
            "managed-by": "pulumi",
        }
        base_labels.update(self.additional_labels)
        return base_labels

    def stack_config(self, namespace=None) -> StackConfig:
        """Build the typed stack input; namespace is an existing Namespace resource to reuse"""
        return StackConfig(
            name=self.stack_name,
            container=parse_container(self.container),
            dns_zone_name=self.dns_zone_name,
            domain=self.domain,
            labels=self.common_labels,
            replicas=self.replicas,
            service_port=self.service_port,
            liveness_path=self.liveness_path,
            readiness_path=self.readiness_path,
            liveness_probe=self.liveness_probe,
            readiness_probe=self.readiness_probe,
            min_available=self.min_available,
            max_unavailable=self.max_unavailable,
            sidecars=parse_sidecars(self.sidecars, self.stack_name),
            extra_ports=parse_extra_ports(self.extra_ports, self.stack_name),
            strategy=self.strategy,
            namespace=namespace,
        )


def get_config() -> Config:
    """Get the global configuration instance"""
    return Config()

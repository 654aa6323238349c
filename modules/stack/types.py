"""
Stack Types
Typed records for the stack input and its normalized form
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Allocation:
    """CPU or memory request/limit pair, e.g. Allocation("100m", "500m")"""

    request: Optional[str] = None
    limit: Optional[str] = None


@dataclass(frozen=True)
class ExtraPort:
    """Additional port exposed on the main container and on the service"""

    name: str
    port: int
    protocol: str = "TCP"


@dataclass(frozen=True)
class Sidecar:
    """Extra container running in the same pod as the main container"""

    name: str
    image: str
    port: Optional[int] = None
    cpu: Optional[Allocation] = None
    memory: Optional[Allocation] = None
    env: Dict[str, str] = field(default_factory=dict)
    command: Optional[List[str]] = None
    args: Optional[List[str]] = None


@dataclass(frozen=True)
class ContainerSpec:
    """Main application container"""

    image: Optional[str]
    port: Optional[int] = None
    cpu: Optional[Allocation] = None
    memory: Optional[Allocation] = None
    env: Dict[str, str] = field(default_factory=dict)
    command: Optional[List[str]] = None
    args: Optional[List[str]] = None


@dataclass(frozen=True)
class StackConfig:
    """
    Full caller input for one stack

    Every field other than name and container is optional; which optional
    fields are set decides which resources the stack contains.

    Attributes:
        name: Stack identity, used as prefix for every child resource name
        container: Main container spec (image is required)
        dns_zone_name: Cloud DNS managed zone holding the domain record
        domain: Fully qualified domain the stack is served on
        labels: Caller labels applied to every resource
        replicas: Deployment replica count
        service_port: Port the service listens on
        liveness_path: Path for the derived liveness probe
        readiness_path: Path for the derived readiness probe
        liveness_probe: Explicit liveness probe, used as is
        readiness_probe: Explicit readiness probe, used as is
        min_available: Disruption budget lower bound
        max_unavailable: Disruption budget upper bound
        sidecars: Extra containers in the pod
        extra_ports: Extra ports on the container and the service
        strategy: Deployment strategy passed through unchanged
        namespace: Existing namespace to reuse instead of creating one
    """

    name: str
    container: ContainerSpec
    dns_zone_name: Optional[str] = None
    domain: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)
    replicas: Optional[int] = None
    service_port: Optional[int] = None
    liveness_path: Optional[str] = None
    readiness_path: Optional[str] = None
    liveness_probe: Optional[Any] = None
    readiness_probe: Optional[Any] = None
    min_available: Optional[Any] = None
    max_unavailable: Optional[Any] = None
    sidecars: List[Sidecar] = field(default_factory=list)
    extra_ports: List[ExtraPort] = field(default_factory=list)
    strategy: Optional[Any] = None
    namespace: Optional[Any] = None


@dataclass(frozen=True)
class NormalizedStack:
    """StackConfig with labels merged and defaults filled in"""

    name: str
    labels: Dict[str, str]
    container: ContainerSpec
    replicas: int
    service_port: int
    liveness_path: str
    readiness_path: str
    dns_zone_name: Optional[str] = None
    domain: Optional[str] = None
    liveness_probe: Optional[Any] = None
    readiness_probe: Optional[Any] = None
    min_available: Optional[Any] = None
    max_unavailable: Optional[Any] = None
    sidecars: List[Sidecar] = field(default_factory=list)
    extra_ports: List[ExtraPort] = field(default_factory=list)
    strategy: Optional[Any] = None
    namespace: Optional[Any] = None

    @property
    def port(self) -> Optional[int]:
        return self.container.port

    def child_name(self, suffix: str) -> str:
        return f"{self.name}-{suffix}"

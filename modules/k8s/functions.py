"""
Kubernetes Module Functions
Namespace, workload, disruption budget, service and ingress for a GKE stack
"""

import pulumi
import pulumi_kubernetes as k8s
from typing import Dict, List, Optional


def _validate_port(port: int, what: str) -> int:
    if not isinstance(port, int) or isinstance(port, bool) or not 1 <= port <= 65535:
        raise ValueError(f"{what} must be an integer between 1 and 65535, got {port!r}")
    return port


def _resources(cpu=None, memory=None) -> Optional[k8s.core.v1.ResourceRequirementsArgs]:
    requests = {}
    limits = {}

    for resource, allocation in (("cpu", cpu), ("memory", memory)):
        if allocation is None:
            continue
        if allocation.request:
            requests[resource] = allocation.request
        if allocation.limit:
            limits[resource] = allocation.limit

    if not requests and not limits:
        return None

    return k8s.core.v1.ResourceRequirementsArgs(
        requests=requests or None,
        limits=limits or None
    )


def _env(env: Dict[str, str] = None) -> Optional[List[k8s.core.v1.EnvVarArgs]]:
    if not env:
        return None
    return [k8s.core.v1.EnvVarArgs(name=key, value=value) for key, value in env.items()]


def create_namespace(name: str, labels: Dict[str, str] = None,
                     opts: pulumi.ResourceOptions = None) -> Dict[str, any]:
    """
    Create namespace for the stack

    Args:
        name: Resource name
        labels: Labels for the namespace
        opts: Resource options

    Returns:
        Dict with namespace resource and outputs
    """
    labels = labels or {}

    namespace = k8s.core.v1.Namespace(
        name,
        metadata=k8s.meta.v1.ObjectMetaArgs(
            labels=labels
        ),
        opts=opts
    )

    return {
        "namespace": namespace,
        "name": namespace.metadata.name,
        "labels": labels
    }


def create_http_probe(path: str, host: str, port: int) -> k8s.core.v1.ProbeArgs:
    """
    Build an HTTP GET probe; no resource is created

    Args:
        path: Request path
        host: Value of the Host header
        port: Container port to probe

    Returns:
        Probe spec
    """
    return k8s.core.v1.ProbeArgs(
        http_get=k8s.core.v1.HTTPGetActionArgs(
            path=path,
            port=_validate_port(port, "Probe port"),
            http_headers=[k8s.core.v1.HTTPHeaderArgs(name="Host", value=host)]
        )
    )


def create_sidecar_container(sidecar) -> k8s.core.v1.ContainerArgs:
    """Build the container spec for a sidecar"""
    ports = None
    if sidecar.port is not None:
        ports = [k8s.core.v1.ContainerPortArgs(
            container_port=_validate_port(sidecar.port, f"Sidecar {sidecar.name} port")
        )]

    return k8s.core.v1.ContainerArgs(
        name=sidecar.name,
        image=sidecar.image,
        ports=ports,
        env=_env(sidecar.env),
        resources=_resources(sidecar.cpu, sidecar.memory),
        command=sidecar.command,
        args=sidecar.args
    )


def create_pod_spec(name: str, image: str, port: Optional[int] = None,
                    extra_ports: list = None, env: Dict[str, str] = None,
                    cpu=None, memory=None,
                    command: List[str] = None, args: List[str] = None,
                    sidecars: list = None,
                    liveness_probe=None, readiness_probe=None) -> Dict[str, any]:
    """
    Build the pod spec for the stack workload

    Args:
        name: Main container name
        image: Main container image
        port: Main container port, named "http"
        extra_ports: Additional container ports
        env: Environment variables
        cpu: CPU allocation
        memory: Memory allocation
        command: Container entrypoint override
        args: Container arguments
        sidecars: Additional containers
        liveness_probe: Liveness probe spec
        readiness_probe: Readiness probe spec

    Returns:
        Dict with pod spec and the resolved container port (None if no port)
    """
    extra_ports = extra_ports or []
    sidecars = sidecars or []

    ports = []
    if port is not None:
        ports.append(k8s.core.v1.ContainerPortArgs(
            name="http",
            container_port=_validate_port(port, "Container port")
        ))
    for extra in extra_ports:
        ports.append(k8s.core.v1.ContainerPortArgs(
            name=extra.name,
            container_port=_validate_port(extra.port, f"Extra port {extra.name}"),
            protocol=extra.protocol
        ))

    container = k8s.core.v1.ContainerArgs(
        name=name,
        image=image,
        ports=ports or None,
        env=_env(env),
        resources=_resources(cpu, memory),
        command=command,
        args=args,
        liveness_probe=liveness_probe,
        readiness_probe=readiness_probe
    )

    containers = [container] + [create_sidecar_container(sidecar) for sidecar in sidecars]

    return {
        "spec": k8s.core.v1.PodSpecArgs(containers=containers),
        "containers": containers,
        "port": port
    }


def create_deployment(name: str, namespace: Dict[str, any], labels: Dict[str, str],
                      replicas: int, image: str, port: Optional[int] = None,
                      extra_ports: list = None, env: Dict[str, str] = None,
                      cpu=None, memory=None,
                      command: List[str] = None, args: List[str] = None,
                      sidecars: list = None,
                      liveness_probe=None, readiness_probe=None,
                      strategy=None,
                      opts: pulumi.ResourceOptions = None) -> Dict[str, any]:
    """
    Create deployment running the stack workload

    Args:
        name: Resource name
        namespace: Namespace handle
        labels: Labels for the deployment, its selector and its pods
        replicas: Replica count
        image: Main container image
        port: Main container port
        extra_ports: Additional container ports
        env: Environment variables
        cpu: CPU allocation
        memory: Memory allocation
        command: Container entrypoint override
        args: Container arguments
        sidecars: Additional containers
        liveness_probe: Liveness probe spec
        readiness_probe: Readiness probe spec
        strategy: Deployment strategy
        opts: Resource options

    Returns:
        Dict with deployment resource and outputs; "port" is None when the
        container declares no port
    """
    pod = create_pod_spec(
        f"{name}-cont",
        image=image,
        port=port,
        extra_ports=extra_ports,
        env=env,
        cpu=cpu,
        memory=memory,
        command=command,
        args=args,
        sidecars=sidecars,
        liveness_probe=liveness_probe,
        readiness_probe=readiness_probe
    )

    deployment = k8s.apps.v1.Deployment(
        name,
        metadata=k8s.meta.v1.ObjectMetaArgs(
            namespace=namespace["name"],
            labels=labels
        ),
        spec=k8s.apps.v1.DeploymentSpecArgs(
            replicas=replicas,
            selector=k8s.meta.v1.LabelSelectorArgs(
                match_labels=labels
            ),
            template=k8s.core.v1.PodTemplateSpecArgs(
                metadata=k8s.meta.v1.ObjectMetaArgs(
                    labels=labels
                ),
                spec=pod["spec"]
            ),
            strategy=strategy
        ),
        opts=opts
    )

    return {
        "deployment": deployment,
        "name": deployment.metadata.name,
        "port": pod["port"],
        "labels": labels
    }


def create_pod_disruption_budget(name: str, namespace: Dict[str, any], labels: Dict[str, str],
                                 match_labels: Dict[str, str],
                                 min_available=None, max_unavailable=None,
                                 opts: pulumi.ResourceOptions = None) -> Dict[str, any]:
    """
    Create pod disruption budget for the stack pods

    Args:
        name: Resource name
        namespace: Namespace handle
        labels: Labels for the budget
        match_labels: Pod selector
        min_available: Minimum available pods (count or percentage)
        max_unavailable: Maximum unavailable pods (count or percentage)
        opts: Resource options

    Returns:
        Dict with disruption budget resource and outputs
    """
    budget = k8s.policy.v1.PodDisruptionBudget(
        name,
        metadata=k8s.meta.v1.ObjectMetaArgs(
            namespace=namespace["name"],
            labels=labels
        ),
        spec=k8s.policy.v1.PodDisruptionBudgetSpecArgs(
            min_available=min_available,
            max_unavailable=max_unavailable,
            selector=k8s.meta.v1.LabelSelectorArgs(
                match_labels=match_labels
            )
        ),
        opts=opts
    )

    return {
        "disruption_budget": budget,
        "name": budget.metadata.name,
        "labels": labels
    }


def create_service(name: str, namespace: Dict[str, any], labels: Dict[str, str],
                   port: int, target_port: int, extra_ports: list = None,
                   opts: pulumi.ResourceOptions = None) -> Dict[str, any]:
    """
    Create service in front of the stack pods

    The service is NEG-enabled so a GCE ingress can route to pods directly.

    Args:
        name: Resource name
        namespace: Namespace handle
        labels: Labels for the service and its pod selector
        port: Service port
        target_port: Container port traffic is sent to
        extra_ports: Additional ports, exposed on the same number
        opts: Resource options

    Returns:
        Dict with service resource and outputs
    """
    extra_ports = extra_ports or []

    ports = [k8s.core.v1.ServicePortArgs(
        name="http",
        port=_validate_port(port, "Service port"),
        target_port=_validate_port(target_port, "Service target port"),
        protocol="TCP"
    )]
    for extra in extra_ports:
        ports.append(k8s.core.v1.ServicePortArgs(
            name=extra.name,
            port=_validate_port(extra.port, f"Extra port {extra.name}"),
            target_port=extra.port,
            protocol=extra.protocol
        ))

    service = k8s.core.v1.Service(
        name,
        metadata=k8s.meta.v1.ObjectMetaArgs(
            namespace=namespace["name"],
            labels=labels,
            annotations={
                "cloud.google.com/neg": '{"ingress": true}'
            }
        ),
        spec=k8s.core.v1.ServiceSpecArgs(
            type="ClusterIP",
            selector=labels,
            ports=ports
        ),
        opts=opts
    )

    return {
        "service": service,
        "name": service.metadata.name,
        "port": port,
        "target_port": target_port,
        "labels": labels
    }


def create_ingress(name: str, namespace: Dict[str, any], labels: Dict[str, str],
                   certificate: Dict[str, any], domain: str,
                   service: Dict[str, any], address: Dict[str, any],
                   opts: pulumi.ResourceOptions = None) -> Dict[str, any]:
    """
    Create GCE ingress serving the domain over the reserved address

    Args:
        name: Resource name
        namespace: Namespace handle
        labels: Labels for the ingress
        certificate: Managed certificate handle
        domain: Host the ingress answers for
        service: Backend service handle
        address: Global address handle
        opts: Resource options

    Returns:
        Dict with ingress resource and outputs
    """
    backend = k8s.networking.v1.IngressBackendArgs(
        service=k8s.networking.v1.IngressServiceBackendArgs(
            name=service["name"],
            port=k8s.networking.v1.ServiceBackendPortArgs(
                number=service["port"]
            )
        )
    )

    ingress = k8s.networking.v1.Ingress(
        name,
        metadata=k8s.meta.v1.ObjectMetaArgs(
            namespace=namespace["name"],
            labels=labels,
            annotations={
                "kubernetes.io/ingress.class": "gce",
                "kubernetes.io/ingress.global-static-ip-name": address["name"],
                "networking.gke.io/managed-certificates": certificate["name"]
            }
        ),
        spec=k8s.networking.v1.IngressSpecArgs(
            default_backend=backend,
            rules=[k8s.networking.v1.IngressRuleArgs(
                host=domain,
                http=k8s.networking.v1.HTTPIngressRuleValueArgs(
                    paths=[k8s.networking.v1.HTTPIngressPathArgs(
                        path="/",
                        path_type="Prefix",
                        backend=backend
                    )]
                )
            )]
        ),
        opts=opts
    )

    return {
        "ingress": ingress,
        "name": ingress.metadata.name,
        "domain": domain,
        "service": service,
        "certificate": certificate,
        "address": address,
        "labels": labels
    }

"""
Kubernetes Module
Workload-side resources of a GKE stack
"""

from .functions import (
    create_deployment,
    create_http_probe,
    create_ingress,
    create_namespace,
    create_pod_disruption_budget,
    create_pod_spec,
    create_service,
)

__all__ = [
    "create_deployment",
    "create_http_probe",
    "create_ingress",
    "create_namespace",
    "create_pod_disruption_budget",
    "create_pod_spec",
    "create_service",
]

"""
Pulumi modules for a GKE application stack
Simple function-based approach following Pulumi best practices
"""

from .gcp import create_address, create_certificate, create_dns_records
from .k8s import (
    create_deployment,
    create_http_probe,
    create_ingress,
    create_namespace,
    create_pod_disruption_budget,
    create_service,
)
from .stack import GkeStack, StackConfig

__all__ = [
    "create_address",
    "create_certificate",
    "create_dns_records",
    "create_deployment",
    "create_http_probe",
    "create_ingress",
    "create_namespace",
    "create_pod_disruption_budget",
    "create_service",
    "GkeStack",
    "StackConfig",
]

"""
GKE Stack component
Groups every resource of one application stack under a single parent
"""

import pulumi
from typing import Optional

from modules.gcp.functions import create_address, create_certificate, create_dns_records
from modules.k8s.functions import (
    create_deployment,
    create_http_probe,
    create_ingress,
    create_namespace,
    create_pod_disruption_budget,
    create_service,
)

from .normalize import normalize
from .resolver import (
    ADDRESS,
    CERTIFICATE,
    DEPLOYMENT,
    DISRUPTION_BUDGET,
    DNS_RECORDS,
    INGRESS,
    LIVENESS_PROBE,
    NAMESPACE,
    READINESS_PROBE,
    SERVICE,
    Composers,
    resolve,
)
from .types import StackConfig


def default_composers() -> Composers:
    """Composers backed by the Kubernetes and GCP providers"""
    return Composers(
        create_namespace=create_namespace,
        create_address=create_address,
        create_dns_records=create_dns_records,
        create_certificate=create_certificate,
        create_http_probe=create_http_probe,
        create_deployment=create_deployment,
        create_pod_disruption_budget=create_pod_disruption_budget,
        create_service=create_service,
        create_ingress=create_ingress,
    )


class GkeStack(pulumi.ComponentResource):
    """
    One application stack on GKE

    Every entity handle is exposed as an attribute and is None when the
    configuration does not call for that entity.
    """

    def __init__(self, name: str, config: StackConfig,
                 composers: Optional[Composers] = None,
                 opts: Optional[pulumi.ResourceOptions] = None):
        # Fail on bad input before the component itself is registered
        stack = normalize(config)

        super().__init__("k8s:gke:stack", name, None, opts)

        self.stack = stack
        self.labels = stack.labels
        self.resolution = resolve(
            stack,
            composers or default_composers(),
            pulumi.ResourceOptions(parent=self),
        )

        self.namespace = self.resolution.handle(NAMESPACE)
        self.address = self.resolution.handle(ADDRESS)
        self.dns_records = self.resolution.handle(DNS_RECORDS)
        self.certificate = self.resolution.handle(CERTIFICATE)
        self.readiness_probe = self.resolution.handle(READINESS_PROBE)
        self.liveness_probe = self.resolution.handle(LIVENESS_PROBE)
        self.deployment = self.resolution.handle(DEPLOYMENT)
        self.disruption_budget = self.resolution.handle(DISRUPTION_BUDGET)
        self.service = self.resolution.handle(SERVICE)
        self.ingress = self.resolution.handle(INGRESS)

        pulumi.log.info(
            f"Stack {name}: present {', '.join(self.resolution.present())}; "
            f"absent {', '.join(self.resolution.absent()) or 'none'}"
        )

        self.register_outputs({
            "labels": self.labels,
            "namespace": self.namespace["name"],
            "deployment": self.deployment["name"],
            "service": self.service["name"] if self.service else None,
            "ingress": self.ingress["name"] if self.ingress else None,
            "ip_address": self.address["ip_address"] if self.address else None,
            "domain": stack.domain if self.ingress else None,
        })

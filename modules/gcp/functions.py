"""
GCP Module Functions
Static address, DNS record and managed certificate for an exposed GKE stack
"""

import pulumi
import pulumi_gcp as gcp
import pulumi_kubernetes as k8s
from typing import Dict

DNS_RECORD_TTL = 300


def create_address(name: str, labels: Dict[str, str] = None,
                   opts: pulumi.ResourceOptions = None) -> Dict[str, any]:
    """
    Reserve a global static IP for the stack ingress

    Args:
        name: Resource name
        labels: Labels for the address
        opts: Resource options

    Returns:
        Dict with address resource and outputs
    """
    labels = labels or {}

    address = gcp.compute.GlobalAddress(
        name,
        labels=labels,
        opts=opts
    )

    return {
        "address": address,
        "name": address.name,
        "ip_address": address.address,
        "labels": labels
    }


def create_dns_records(name: str, dns_zone_name: str, domain: str,
                       address: Dict[str, any], labels: Dict[str, str] = None,
                       opts: pulumi.ResourceOptions = None) -> Dict[str, any]:
    """
    Create A record pointing the domain at the reserved address

    Record sets carry no labels in Cloud DNS; labels are kept on the handle only.

    Args:
        name: Resource name
        dns_zone_name: Managed zone holding the record
        domain: Domain name, with or without trailing dot
        address: Address handle
        labels: Stack labels
        opts: Resource options

    Returns:
        Dict with record set resource and outputs
    """
    labels = labels or {}
    fqdn = domain if domain.endswith(".") else f"{domain}."

    record_set = gcp.dns.RecordSet(
        name,
        managed_zone=dns_zone_name,
        name=fqdn,
        type="A",
        ttl=DNS_RECORD_TTL,
        rrdatas=[address["ip_address"]],
        opts=opts
    )

    return {
        "record_set": record_set,
        "name": record_set.name,
        "domain": domain.rstrip("."),
        "labels": labels
    }


def create_certificate(name: str, namespace: Dict[str, any], dns_records: Dict[str, any],
                       labels: Dict[str, str] = None,
                       opts: pulumi.ResourceOptions = None) -> Dict[str, any]:
    """
    Create GKE managed certificate for the DNS record's domain

    Args:
        name: Resource name, also used as the certificate object name
        namespace: Namespace handle
        dns_records: DNS record handle
        labels: Labels for the certificate
        opts: Resource options

    Returns:
        Dict with certificate resource and outputs
    """
    labels = labels or {}

    certificate = k8s.apiextensions.CustomResource(
        name,
        api_version="networking.gke.io/v1",
        kind="ManagedCertificate",
        metadata=k8s.meta.v1.ObjectMetaArgs(
            name=name,
            namespace=namespace["name"],
            labels=labels
        ),
        spec={
            "domains": [dns_records["domain"]]
        },
        opts=opts
    )

    return {
        "certificate": certificate,
        "name": name,
        "domain": dns_records["domain"],
        "labels": labels
    }

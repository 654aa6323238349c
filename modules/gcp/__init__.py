"""
GCP Module
Cloud-side resources of an exposed GKE stack
"""

from .functions import create_address, create_certificate, create_dns_records

__all__ = [
    "create_address",
    "create_certificate",
    "create_dns_records",
]

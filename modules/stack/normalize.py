"""
Stack input normalization
Merges labels, fills defaults and rejects unusable input before anything is created
"""

import pulumi
from typing import Dict

from .errors import StackConfigError
from .types import NormalizedStack, StackConfig

IDENTITY_LABEL = "gestack"

DEFAULT_REPLICAS = 1
DEFAULT_SERVICE_PORT = 80
DEFAULT_PROBE_PATH = "/healthz"


def merge_labels(name: str, labels: Dict[str, str] = None) -> Dict[str, str]:
    """
    Merge caller labels with the stack identity label

    The identity label is applied last, so it always wins over a caller
    label with the same key.

    Args:
        name: Stack name
        labels: Caller labels

    Returns:
        New label dict
    """
    labels = labels or {}

    if IDENTITY_LABEL in labels and labels[IDENTITY_LABEL] != name:
        pulumi.log.warn(
            f"Label '{IDENTITY_LABEL}={labels[IDENTITY_LABEL]}' on stack {name} "
            f"is overridden by the stack identity label"
        )

    return {**labels, IDENTITY_LABEL: name}


def warn_ignored_probe_paths(config: StackConfig) -> None:
    """Explicit probes are used as is; a path override next to one has no effect"""
    for kind in ("liveness", "readiness"):
        if getattr(config, f"{kind}_probe") is not None and getattr(config, f"{kind}_path") is not None:
            pulumi.log.warn(
                f"{kind}_path on stack {config.name} is ignored because {kind}_probe is set"
            )


def validate(config: StackConfig) -> None:
    """Raise StackConfigError for input no stack can be built from"""
    if not config.name:
        raise StackConfigError(config.name, "stack name is required")

    if config.container is None or not config.container.image:
        raise StackConfigError(config.name, "container image is required")

    # A PodDisruptionBudget accepts only one of the two bounds
    if config.min_available is not None and config.max_unavailable is not None:
        raise StackConfigError(config.name, "min_available and max_unavailable are mutually exclusive")


def normalize(config: StackConfig) -> NormalizedStack:
    """
    Build the normalized stack input

    Args:
        config: Caller stack configuration

    Returns:
        NormalizedStack with merged labels and defaults

    Raises:
        StackConfigError: If the configuration fails validation
    """
    validate(config)
    warn_ignored_probe_paths(config)

    return NormalizedStack(
        name=config.name,
        labels=merge_labels(config.name, config.labels),
        container=config.container,
        replicas=config.replicas if config.replicas is not None else DEFAULT_REPLICAS,
        service_port=config.service_port or DEFAULT_SERVICE_PORT,
        liveness_path=config.liveness_path or DEFAULT_PROBE_PATH,
        readiness_path=config.readiness_path or DEFAULT_PROBE_PATH,
        dns_zone_name=config.dns_zone_name,
        domain=config.domain,
        liveness_probe=config.liveness_probe,
        readiness_probe=config.readiness_probe,
        min_available=config.min_available,
        max_unavailable=config.max_unavailable,
        sidecars=list(config.sidecars),
        extra_ports=list(config.extra_ports),
        strategy=config.strategy,
        namespace=config.namespace,
    )

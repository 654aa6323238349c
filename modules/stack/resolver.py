"""
Stack Resolver
Decides which resources a stack contains and wires each created handle
into the resources that depend on it.

Resolution is a single pass over RULES in fixed dependency order. Each rule
checks its precondition against what has already been resolved, then either
records the entity as absent or calls its composer and records the returned
handle as present. Composer errors are not caught here.
"""

import pulumi
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from .types import NormalizedStack

NAMESPACE = "namespace"
ADDRESS = "address"
DNS_RECORDS = "dns_records"
CERTIFICATE = "certificate"
READINESS_PROBE = "readiness_probe"
LIVENESS_PROBE = "liveness_probe"
DEPLOYMENT = "deployment"
DISRUPTION_BUDGET = "disruption_budget"
SERVICE = "service"
INGRESS = "ingress"


@dataclass(frozen=True)
class Present:
    handle: Any


@dataclass(frozen=True)
class Absent:
    reason: str


Resolution = Union[Present, Absent]


class ResolvedState:
    """Entity name -> Present | Absent, in resolution order"""

    def __init__(self):
        self._entries: Dict[str, Resolution] = {}

    def record(self, entity: str, resolution: Resolution) -> None:
        if entity in self._entries:
            raise ValueError(f"{entity} already resolved")
        self._entries[entity] = resolution

    def exists(self, entity: str) -> bool:
        return isinstance(self._entries.get(entity), Present)

    def handle(self, entity: str) -> Optional[Any]:
        resolution = self._entries.get(entity)
        if isinstance(resolution, Present):
            return resolution.handle
        return None

    def __getitem__(self, entity: str) -> Resolution:
        return self._entries[entity]

    def __contains__(self, entity: str) -> bool:
        return entity in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def items(self) -> List[Tuple[str, Resolution]]:
        return list(self._entries.items())

    def present(self) -> List[str]:
        return [entity for entity in self._entries if self.exists(entity)]

    def absent(self) -> List[str]:
        return [entity for entity in self._entries if not self.exists(entity)]


@dataclass(frozen=True)
class Composers:
    """Resource constructors called by the resolver, one per entity kind"""

    create_namespace: Callable[..., Dict[str, Any]]
    create_address: Callable[..., Dict[str, Any]]
    create_dns_records: Callable[..., Dict[str, Any]]
    create_certificate: Callable[..., Dict[str, Any]]
    create_http_probe: Callable[..., Any]
    create_deployment: Callable[..., Dict[str, Any]]
    create_pod_disruption_budget: Callable[..., Dict[str, Any]]
    create_service: Callable[..., Dict[str, Any]]
    create_ingress: Callable[..., Dict[str, Any]]


@dataclass(frozen=True)
class Rule:
    """
    One entity of the stack graph

    Attributes:
        entity: Entity name the handle is stored under
        requires: What must hold for the entity to exist, used as absence reason
        precondition: (stack, state) -> bool
        compose: (stack, state, composers, opts) -> handle
    """

    entity: str
    requires: str
    precondition: Callable[[NormalizedStack, ResolvedState], bool]
    compose: Callable[[NormalizedStack, ResolvedState, Composers, Optional[pulumi.ResourceOptions]], Any]


def _always(stack: NormalizedStack, state: ResolvedState) -> bool:
    return True


def _exposes_domain(stack: NormalizedStack) -> bool:
    return stack.port is not None and bool(stack.dns_zone_name) and bool(stack.domain)


def _compose_namespace(stack, state, composers, opts):
    # Caller namespaces are shared; their lifecycle stays with the caller
    if stack.namespace is not None:
        return {
            "namespace": stack.namespace,
            "name": stack.namespace.metadata.name,
            "owned": False,
        }

    handle = composers.create_namespace(
        stack.child_name("ns"),
        labels=dict(stack.labels),
        opts=opts,
    )
    return {**handle, "owned": True}


def _compose_address(stack, state, composers, opts):
    return composers.create_address(
        stack.child_name("address"),
        labels=dict(stack.labels),
        opts=opts,
    )


def _compose_dns_records(stack, state, composers, opts):
    return composers.create_dns_records(
        stack.child_name("dns"),
        labels=dict(stack.labels),
        dns_zone_name=stack.dns_zone_name,
        domain=stack.domain,
        address=state.handle(ADDRESS),
        opts=opts,
    )


def _compose_certificate(stack, state, composers, opts):
    return composers.create_certificate(
        stack.child_name("cert"),
        labels=dict(stack.labels),
        namespace=state.handle(NAMESPACE),
        dns_records=state.handle(DNS_RECORDS),
        opts=opts,
    )


def _probe_rule(entity: str, explicit_field: str, path_field: str) -> Rule:
    def precondition(stack, state):
        if getattr(stack, explicit_field) is not None:
            return True
        return bool(stack.domain) and stack.port is not None

    def compose(stack, state, composers, opts):
        explicit = getattr(stack, explicit_field)
        if explicit is not None:
            return explicit
        return composers.create_http_probe(
            path=getattr(stack, path_field),
            host=stack.domain,
            port=stack.port,
        )

    return Rule(
        entity=entity,
        requires=f"{explicit_field}, or domain and container port",
        precondition=precondition,
        compose=compose,
    )


def _compose_deployment(stack, state, composers, opts):
    container = stack.container
    return composers.create_deployment(
        stack.child_name("dep"),
        namespace=state.handle(NAMESPACE),
        labels=dict(stack.labels),
        replicas=stack.replicas,
        image=container.image,
        port=container.port,
        extra_ports=list(stack.extra_ports),
        env=dict(container.env),
        cpu=container.cpu,
        memory=container.memory,
        command=container.command,
        args=container.args,
        sidecars=list(stack.sidecars),
        liveness_probe=state.handle(LIVENESS_PROBE),
        readiness_probe=state.handle(READINESS_PROBE),
        strategy=stack.strategy,
        opts=opts,
    )


def _compose_disruption_budget(stack, state, composers, opts):
    return composers.create_pod_disruption_budget(
        stack.child_name("pdb"),
        namespace=state.handle(NAMESPACE),
        labels=dict(stack.labels),
        match_labels=dict(stack.labels),
        min_available=stack.min_available,
        max_unavailable=stack.max_unavailable,
        opts=opts,
    )


def _deployment_port(state: ResolvedState) -> Optional[int]:
    deployment = state.handle(DEPLOYMENT)
    if deployment is None:
        return None
    return deployment.get("port")


def _compose_service(stack, state, composers, opts):
    return composers.create_service(
        stack.child_name("svc"),
        namespace=state.handle(NAMESPACE),
        labels=dict(stack.labels),
        port=stack.service_port,
        target_port=_deployment_port(state),
        extra_ports=list(stack.extra_ports),
        opts=opts,
    )


def _compose_ingress(stack, state, composers, opts):
    return composers.create_ingress(
        stack.child_name("ing"),
        namespace=state.handle(NAMESPACE),
        labels=dict(stack.labels),
        certificate=state.handle(CERTIFICATE),
        domain=stack.domain,
        service=state.handle(SERVICE),
        address=state.handle(ADDRESS),
        opts=opts,
    )


RULES: Tuple[Rule, ...] = (
    Rule(
        entity=NAMESPACE,
        requires="nothing",
        precondition=_always,
        compose=_compose_namespace,
    ),
    Rule(
        entity=ADDRESS,
        requires="container port, dns zone and domain",
        precondition=lambda stack, state: _exposes_domain(stack),
        compose=_compose_address,
    ),
    Rule(
        entity=DNS_RECORDS,
        requires="address, dns zone and domain",
        precondition=lambda stack, state: (
            state.exists(ADDRESS) and bool(stack.dns_zone_name) and bool(stack.domain)
        ),
        compose=_compose_dns_records,
    ),
    Rule(
        entity=CERTIFICATE,
        requires="dns records",
        precondition=lambda stack, state: state.exists(DNS_RECORDS),
        compose=_compose_certificate,
    ),
    _probe_rule(READINESS_PROBE, "readiness_probe", "readiness_path"),
    _probe_rule(LIVENESS_PROBE, "liveness_probe", "liveness_path"),
    Rule(
        entity=DEPLOYMENT,
        requires="nothing",
        precondition=_always,
        compose=_compose_deployment,
    ),
    Rule(
        entity=DISRUPTION_BUDGET,
        requires="min_available or max_unavailable",
        precondition=lambda stack, state: (
            stack.min_available is not None or stack.max_unavailable is not None
        ),
        compose=_compose_disruption_budget,
    ),
    Rule(
        entity=SERVICE,
        requires="deployment exposing a port",
        precondition=lambda stack, state: _deployment_port(state) is not None,
        compose=_compose_service,
    ),
    Rule(
        entity=INGRESS,
        requires="service, certificate, address, domain and dns zone",
        precondition=lambda stack, state: (
            state.exists(SERVICE)
            and state.exists(CERTIFICATE)
            and state.exists(ADDRESS)
            and bool(stack.domain)
            and bool(stack.dns_zone_name)
        ),
        compose=_compose_ingress,
    ),
)


def resolve(stack: NormalizedStack,
            composers: Composers,
            opts: Optional[pulumi.ResourceOptions] = None,
            rules: Tuple[Rule, ...] = RULES) -> ResolvedState:
    """
    Resolve every stack entity in rule order

    Args:
        stack: Normalized stack input
        composers: Resource constructors
        opts: Resource options passed to every composer (parent scope)
        rules: Rules to evaluate, in order

    Returns:
        ResolvedState with one Present or Absent entry per rule
    """
    state = ResolvedState()

    for rule in rules:
        if not rule.precondition(stack, state):
            pulumi.log.debug(f"{stack.name}: {rule.entity} absent (requires {rule.requires})")
            state.record(rule.entity, Absent(rule.requires))
            continue

        handle = rule.compose(stack, state, composers, opts)
        pulumi.log.debug(f"{stack.name}: {rule.entity} present")
        state.record(rule.entity, Present(handle))

    return state

"""
GKE Application Stack
Namespace, workload, service and, when a domain is configured, DNS, TLS and ingress
"""
import pulumi
import pulumi_kubernetes as k8s
from config import get_config
from modules.stack import GkeStack

# Configuration
config = get_config()
name = config.stack_name

# Explicit cluster credentials; otherwise the ambient kubeconfig is used
k8s_provider = None
if config.kubeconfig:
    k8s_provider = k8s.Provider(f"{name}-k8s", kubeconfig=config.kubeconfig)

# Shared namespace, owned outside this stack
namespace = None
if config.existing_namespace:
    namespace = k8s.core.v1.Namespace.get(
        f"{name}-existing-ns",
        config.existing_namespace,
        opts=pulumi.ResourceOptions(provider=k8s_provider))

stack = GkeStack(
    name,
    config.stack_config(namespace=namespace),
    opts=pulumi.ResourceOptions(providers=[k8s_provider] if k8s_provider else None))

# Exports
pulumi.export("namespace", stack.namespace["name"])
pulumi.export("deployment", stack.deployment["name"])
pulumi.export("labels", stack.labels)
if stack.service:
    pulumi.export("service", stack.service["name"])
if stack.address:
    pulumi.export("ip_address", stack.address["ip_address"])
if stack.ingress:
    pulumi.export("url", f"https://{stack.ingress['domain']}")

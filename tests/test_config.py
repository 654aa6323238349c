"""
Unit tests for Pulumi configuration loading
"""

import unittest
from unittest.mock import Mock, patch
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import count_or_percent, get_config, parse_container, parse_extra_ports, parse_sidecars
from modules.stack.errors import StackConfigError
from modules.stack.types import Allocation


def fake_pulumi_config(values):
    """Mock pulumi.Config() backed by a dict"""
    config = Mock()
    config.get.side_effect = lambda key: values.get(key)
    config.get_int.side_effect = lambda key: values.get(key)
    config.get_object.side_effect = lambda key: values.get(key)
    return config


class TestParsers(unittest.TestCase):
    """Test config object parsing"""

    def test_count_or_percent(self):
        """Counts become ints, percentages stay strings"""
        self.assertEqual(count_or_percent("2"), 2)
        self.assertEqual(count_or_percent("50%"), "50%")
        self.assertIsNone(count_or_percent(None))

    def test_parse_container(self):
        """Container object maps to ContainerSpec"""
        container = parse_container({
            "image": "gcr.io/app:1",
            "port": 8080,
            "cpu": {"request": "100m", "limit": "1"},
            "env": {"MODE": "prod"},
            "args": ["--serve"],
        })

        self.assertEqual(container.image, "gcr.io/app:1")
        self.assertEqual(container.port, 8080)
        self.assertEqual(container.cpu, Allocation(request="100m", limit="1"))
        self.assertIsNone(container.memory)
        self.assertEqual(container.env, {"MODE": "prod"})
        self.assertEqual(container.args, ["--serve"])

    def test_parse_lists(self):
        """Sidecars and extra ports map to their records"""
        sidecars = parse_sidecars([{"name": "proxy", "image": "envoy", "port": 15000}])
        ports = parse_extra_ports([{"name": "metrics", "port": 9090}])

        self.assertEqual(sidecars[0].name, "proxy")
        self.assertEqual(sidecars[0].port, 15000)
        self.assertEqual(ports[0].protocol, "TCP")
        self.assertEqual(parse_sidecars(None), [])

    def test_sidecar_without_image(self):
        """A sidecar entry missing its image names the field"""
        with self.assertRaises(StackConfigError) as ctx:
            parse_sidecars([{"name": "proxy"}], "api")
        self.assertIn("missing 'image'", str(ctx.exception))
        self.assertEqual(ctx.exception.stack_name, "api")

    def test_extra_port_without_port(self):
        """An extra port entry missing its port names the field"""
        with self.assertRaises(StackConfigError) as ctx:
            parse_extra_ports([{"name": "metrics"}], "api")
        self.assertIn("missing 'port'", str(ctx.exception))


class TestConfig(unittest.TestCase):
    """Test the Config class"""

    def test_stack_config(self):
        """Config values end up on the StackConfig"""
        values = {
            "name": "api",
            "domain": "api.example.com",
            "dns_zone_name": "zone1",
            "container": {"image": "x", "port": 8080},
            "labels": {"team": "core"},
            "replicas": 2,
            "min_available": "1",
        }
        with patch('config.pulumi') as mock_pulumi:
            mock_pulumi.Config.return_value = fake_pulumi_config(values)
            stack_config = get_config().stack_config()

        self.assertEqual(stack_config.name, "api")
        self.assertEqual(stack_config.domain, "api.example.com")
        self.assertEqual(stack_config.dns_zone_name, "zone1")
        self.assertEqual(stack_config.container.port, 8080)
        self.assertEqual(stack_config.replicas, 2)
        self.assertEqual(stack_config.min_available, 1)
        self.assertIsNone(stack_config.max_unavailable)
        self.assertEqual(stack_config.labels, {"managed-by": "pulumi", "team": "core"})
        self.assertIsNone(stack_config.namespace)

    def test_name_defaults_to_project(self):
        """Without a name the Pulumi project name is used"""
        with patch('config.pulumi') as mock_pulumi:
            mock_pulumi.Config.return_value = fake_pulumi_config({"container": {"image": "x"}})
            mock_pulumi.get_project.return_value = "gke-stack"
            self.assertEqual(get_config().stack_name, "gke-stack")

    def test_malformed_sidecar_reported(self):
        """A sidecar without a name fails with the stack name attached"""
        values = {"name": "api", "container": {"image": "x"}, "sidecars": [{"image": "envoy"}]}
        with patch('config.pulumi') as mock_pulumi:
            mock_pulumi.Config.return_value = fake_pulumi_config(values)
            with self.assertRaises(StackConfigError) as ctx:
                get_config().stack_config()
        self.assertIn("missing 'name'", str(ctx.exception))
        self.assertEqual(ctx.exception.stack_name, "api")


if __name__ == '__main__':
    unittest.main()

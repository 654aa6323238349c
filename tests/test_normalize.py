"""
Unit tests for stack input normalization
"""

import unittest
from unittest.mock import patch
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from modules.stack.errors import StackConfigError
from modules.stack.normalize import (
    DEFAULT_PROBE_PATH,
    DEFAULT_REPLICAS,
    DEFAULT_SERVICE_PORT,
    IDENTITY_LABEL,
    merge_labels,
    normalize,
)
from modules.stack.types import ContainerSpec, StackConfig


class TestLabels(unittest.TestCase):
    """Test label merging"""

    def test_identity_label_added(self):
        """Caller labels keep their values and gain the identity label"""
        self.assertEqual(
            merge_labels("api", {"team": "core"}),
            {"team": "core", IDENTITY_LABEL: "api"}
        )

    def test_identity_label_without_caller_labels(self):
        """No caller labels still yields the identity label"""
        self.assertEqual(merge_labels("api"), {IDENTITY_LABEL: "api"})

    def test_identity_label_wins_collision(self):
        """A caller value for the identity key is overridden with a warning"""
        with patch("modules.stack.normalize.pulumi") as mock_pulumi:
            labels = merge_labels("api", {IDENTITY_LABEL: "other"})

        self.assertEqual(labels, {IDENTITY_LABEL: "api"})
        mock_pulumi.log.warn.assert_called_once()

    def test_matching_identity_label_not_warned(self):
        """A caller value equal to the stack name is not a conflict"""
        with patch("modules.stack.normalize.pulumi") as mock_pulumi:
            merge_labels("api", {IDENTITY_LABEL: "api"})
        mock_pulumi.log.warn.assert_not_called()

    def test_caller_labels_not_mutated(self):
        """Merging returns a new dict"""
        caller = {"team": "core"}
        merge_labels("api", caller)
        self.assertEqual(caller, {"team": "core"})


class TestDefaults(unittest.TestCase):
    """Test default filling"""

    def test_defaults_filled(self):
        """Replicas, service port and probe paths get defaults"""
        stack = normalize(StackConfig(name="worker", container=ContainerSpec(image="x")))

        self.assertEqual(stack.replicas, DEFAULT_REPLICAS)
        self.assertEqual(stack.service_port, DEFAULT_SERVICE_PORT)
        self.assertEqual(stack.liveness_path, DEFAULT_PROBE_PATH)
        self.assertEqual(stack.readiness_path, DEFAULT_PROBE_PATH)
        self.assertEqual(stack.replicas, 1)
        self.assertEqual(stack.service_port, 80)
        self.assertEqual(stack.liveness_path, "/healthz")

    def test_overrides_kept(self):
        """Caller values are not replaced by defaults"""
        stack = normalize(StackConfig(
            name="api",
            container=ContainerSpec(image="x", port=8080),
            replicas=3,
            service_port=8443,
            liveness_path="/live",
            readiness_path="/ready",
        ))

        self.assertEqual(stack.replicas, 3)
        self.assertEqual(stack.service_port, 8443)
        self.assertEqual(stack.liveness_path, "/live")
        self.assertEqual(stack.readiness_path, "/ready")
        self.assertEqual(stack.port, 8080)

    def test_zero_replicas_kept(self):
        """Scaling to zero is a valid request"""
        stack = normalize(StackConfig(name="api", container=ContainerSpec(image="x"), replicas=0))
        self.assertEqual(stack.replicas, 0)

    def test_child_name(self):
        """Child names are prefixed with the stack name"""
        stack = normalize(StackConfig(name="api", container=ContainerSpec(image="x")))
        self.assertEqual(stack.child_name("svc"), "api-svc")


class TestValidation(unittest.TestCase):
    """Test caller input errors"""

    def test_missing_image(self):
        """A container without image is rejected"""
        with self.assertRaises(StackConfigError) as ctx:
            normalize(StackConfig(name="api", container=ContainerSpec(image=None)))
        self.assertIn("image", str(ctx.exception))
        self.assertEqual(ctx.exception.stack_name, "api")

    def test_missing_name(self):
        """A stack needs a name"""
        with self.assertRaises(StackConfigError):
            normalize(StackConfig(name="", container=ContainerSpec(image="x")))

    def test_explicit_probe_with_path_accepted(self):
        """A path override next to an explicit probe is ignored with a warning"""
        probe = {"httpGet": {"path": "/"}}
        with patch("modules.stack.normalize.pulumi") as mock_pulumi:
            stack = normalize(StackConfig(
                name="api",
                container=ContainerSpec(image="x", port=8080),
                readiness_probe=probe,
                readiness_path="/ready",
            ))

        self.assertIs(stack.readiness_probe, probe)
        mock_pulumi.log.warn.assert_called_once()
        self.assertIn("readiness_path", mock_pulumi.log.warn.call_args.args[0])

    def test_both_disruption_bounds(self):
        """min_available and max_unavailable cannot both be set"""
        with self.assertRaises(StackConfigError):
            normalize(StackConfig(
                name="api",
                container=ContainerSpec(image="x"),
                min_available=1,
                max_unavailable=1,
            ))

    def test_is_value_error(self):
        """Config errors are ValueErrors"""
        self.assertTrue(issubclass(StackConfigError, ValueError))


if __name__ == '__main__':
    unittest.main()

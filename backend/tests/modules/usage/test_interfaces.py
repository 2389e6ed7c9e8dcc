"""Tests for usage module interfaces."""

from unittest.mock import MagicMock

from modules.usage.interfaces import IUsageGate


class TestIUsageGate:
    def test_is_runtime_checkable(self):
        """IUsageGate should support isinstance checks."""
        assert not isinstance(object(), IUsageGate)

    def test_mock_with_methods_satisfies_protocol(self):
        gate = MagicMock(spec=["check", "admit", "record_success", "release", "get_stats"])
        assert isinstance(gate, IUsageGate)

import unittest
from unittest.mock import MagicMock

from vsphere_provider.config import Settings
from vsphere_provider.errors import ConfigResolutionError, ProviderError, SchemaValidationError
from vsphere_provider.provider import Provider
from vsphere_provider.resources import HOST_PORT_GROUP
from vsphere_provider.tests.fake_vcenter import FakeInventory

CONFIG = {
    "name": "pg-test",
    "host_system_id": "host-10",
    "datacenter_id": "datacenter-3",
    "virtual_switch_name": "vSwitch0",
    "vlan_id": 10,
}


class ProviderTests(unittest.TestCase):
    def setUp(self):
        self.inventory = FakeInventory()
        self.inventory.add_network("pg-test", "network-42")
        self.inventory.add_network("pg-renamed", "network-43")
        self.provider = Provider(Settings(), client=self.inventory.client())

    def _calls(self):
        return [call for call, _ in self.inventory.ns.calls]

    def test_apply_creates_when_no_prior_state(self):
        state = self.provider.apply(HOST_PORT_GROUP, CONFIG)
        self.assertEqual(state["id"], "network-42")
        self.assertEqual(self._calls(), ["AddPortGroup"])

    def test_apply_without_changes_only_refreshes(self):
        state = self.provider.apply(HOST_PORT_GROUP, CONFIG)
        again = self.provider.apply(HOST_PORT_GROUP, CONFIG, state)
        self.assertEqual(again, state)
        self.assertEqual(self._calls(), ["AddPortGroup"])

    def test_apply_with_only_active_nics_is_stable(self):
        """standby_nics read back as [] must not count as a change."""
        config = dict(CONFIG, active_nics=["vmnic0"])
        state = self.provider.apply(HOST_PORT_GROUP, config)
        self.assertEqual(state["standby_nics"], [])

        self.provider.apply(HOST_PORT_GROUP, config, state)
        self.assertEqual(self._calls(), ["AddPortGroup"])

    def test_apply_updates_in_place(self):
        state = self.provider.apply(HOST_PORT_GROUP, CONFIG)
        state = self.provider.apply(HOST_PORT_GROUP, dict(CONFIG, vlan_id=20, allow_promiscuous=True), state)
        self.assertEqual(self._calls(), ["AddPortGroup", "UpdatePortGroup"])
        self.assertEqual(state["vlan_id"], 20)
        self.assertTrue(state["allow_promiscuous"])

    def test_apply_replaces_on_force_new_change(self):
        state = self.provider.apply(HOST_PORT_GROUP, CONFIG)
        state = self.provider.apply(HOST_PORT_GROUP, dict(CONFIG, name="pg-renamed"), state)
        self.assertEqual(self._calls(), ["AddPortGroup", "RemovePortGroup", "AddPortGroup"])
        self.assertEqual(state["id"], "network-43")
        self.assertEqual([pg.spec.name for pg in self.inventory.ns.networkInfo.portgroup], ["pg-renamed"])

    def test_apply_rejects_invalid_config(self):
        with self.assertRaises(SchemaValidationError):
            self.provider.apply(HOST_PORT_GROUP, dict(CONFIG, key="mine"))
        self.assertEqual(self._calls(), [])

    def test_destroy_then_refresh_returns_none(self):
        state = self.provider.apply(HOST_PORT_GROUP, CONFIG)
        self.provider.destroy(HOST_PORT_GROUP, state)
        self.assertIsNone(self.provider.refresh(HOST_PORT_GROUP, state))

    def test_unknown_resource_type(self):
        with self.assertRaises(ProviderError):
            self.provider.resource("vsphere_host_virtual_switch")

    def test_configure_fails_without_connection(self):
        client = MagicMock()
        client.ensure_vcenter_connection.return_value = None
        provider = Provider(Settings(server="vc01"), client=client)
        with self.assertRaises(ConfigResolutionError) as ctx:
            provider.configure()
        self.assertIn("vc01", str(ctx.exception))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

import unittest

from pyVmomi import vim

from vsphere_provider.helpers.network_policy import expand_host_network_policy, expand_host_port_group_spec, \
    flatten_host_network_policy, flatten_host_port_group_spec, schema_host_port_group_spec
from vsphere_provider.helpers.port_group import calculate_computed_policy, calculate_ports, \
    port_group_ids_from_resource_id, save_host_port_group_id
from vsphere_provider.errors import ProviderError
from vsphere_provider.schema import Resource, ResourceData

POLICY_KEYS = [
    "check_beacon", "teaming_policy", "notify_switches", "failback", "active_nics", "standby_nics",
    "allow_promiscuous", "allow_forged_transmits", "allow_mac_changes", "shaping_enabled",
    "shaping_average_bandwidth", "shaping_peak_bandwidth", "shaping_burst_size",
]


def _resource():
    schema = schema_host_port_group_spec()
    for key in ("active_nics", "standby_nics"):
        schema[key] = schema[key].model_copy(update={"required": False, "optional": True})
    return Resource(schema, create=None, read=None, update=None, delete=None)


class NetworkPolicyTests(unittest.TestCase):
    def setUp(self):
        self.resource = _resource()

    def _round_trip(self, config):
        config = self.resource.validate_config(config)
        spec = expand_host_port_group_spec(self.resource.data(config=config))

        out = ResourceData(self.resource.schema)
        out.set_id("test")
        flatten_host_port_group_spec(out, spec)
        return config, out.state()

    def test_full_policy_round_trips(self):
        config, state = self._round_trip({
            "name": "pg-full",
            "virtual_switch_name": "vSwitch1",
            "vlan_id": 4095,
            "check_beacon": True,
            "teaming_policy": "failover_explicit",
            "notify_switches": False,
            "failback": False,
            "active_nics": ["vmnic0"],
            "standby_nics": ["vmnic1", "vmnic2"],
            "allow_promiscuous": False,
            "allow_forged_transmits": True,
            "allow_mac_changes": False,
            "shaping_enabled": True,
            "shaping_average_bandwidth": 100000,
            "shaping_peak_bandwidth": 200000,
            "shaping_burst_size": 1024000,
        })
        for key, value in config.items():
            self.assertEqual(state[key], value, key)

    def test_sparse_policy_round_trips(self):
        config, state = self._round_trip({
            "name": "pg-sparse",
            "virtual_switch_name": "vSwitch0",
            "allow_mac_changes": True,
        })
        self.assertEqual(config["vlan_id"], 0)
        for key in POLICY_KEYS:
            self.assertEqual(state.get(key), config.get(key), key)

    def test_failback_is_inverse_of_rolling_order(self):
        d = self.resource.data(config={"name": "pg", "virtual_switch_name": "vs", "failback": True})
        policy = expand_host_network_policy(d)
        self.assertFalse(policy.nicTeaming.rollingOrder)

    def test_unset_values_stay_unset(self):
        d = self.resource.data(config={"name": "pg", "virtual_switch_name": "vs", "vlan_id": 0})
        policy = expand_host_network_policy(d)
        self.assertIsNone(policy.nicTeaming.nicOrder)
        self.assertIsNone(policy.nicTeaming.failureCriteria)
        self.assertIsNone(policy.nicTeaming.rollingOrder)
        self.assertIsNone(policy.nicTeaming.policy)
        self.assertIsNone(policy.security.allowPromiscuous)
        self.assertIsNone(policy.shapingPolicy.averageBandwidth)

    def test_empty_nic_lists_are_sent(self):
        d = self.resource.data(config={"name": "pg", "virtual_switch_name": "vs", "active_nics": []})
        policy = expand_host_network_policy(d)
        self.assertIsNotNone(policy.nicTeaming.nicOrder)
        self.assertEqual(list(policy.nicTeaming.nicOrder.activeNic), [])

    def test_flatten_leaves_missing_sections_alone(self):
        d = ResourceData(self.resource.schema)
        d.set_id("test")
        flatten_host_network_policy(d, vim.host.NetworkPolicy())
        self.assertEqual(d.state(), {"id": "test"})


class ComputedPolicyTests(unittest.TestCase):
    def test_computed_policy_is_flat_string_map(self):
        policy = vim.host.NetworkPolicy(
            security=vim.host.NetworkPolicy.SecurityPolicy(
                allowPromiscuous=False, forgedTransmits=True, macChanges=True,
            ),
            nicTeaming=vim.host.NetworkPolicy.NicTeamingPolicy(
                policy="loadbalance_srcid",
                notifySwitches=True,
                rollingOrder=False,
                nicOrder=vim.host.NetworkPolicy.NicOrderPolicy(activeNic=["vmnic0", "vmnic1"], standbyNic=[]),
            ),
            shapingPolicy=vim.host.NetworkPolicy.TrafficShapingPolicy(enabled=False),
        )
        self.assertEqual(calculate_computed_policy(policy), {
            "allow_promiscuous": "false",
            "allow_forged_transmits": "true",
            "allow_mac_changes": "true",
            "teaming_policy": "loadbalance_srcid",
            "notify_switches": "true",
            "failback": "true",
            "active_nics.#": "2",
            "active_nics.0": "vmnic0",
            "active_nics.1": "vmnic1",
            "standby_nics.#": "0",
            "shaping_enabled": "false",
        })

    def test_computed_policy_of_nothing_is_empty(self):
        self.assertEqual(calculate_computed_policy(None), {})

    def test_ports_collapse_into_single_item(self):
        ports = [
            vim.host.PortGroup.Port(key="key-1", mac=["00:50:56:aa:bb:01"], type="virtualMachine"),
            vim.host.PortGroup.Port(key="key-2", mac=["00:50:56:aa:bb:02", "00:50:56:aa:bb:03"], type="host"),
        ]
        self.assertEqual(calculate_ports(ports), [{
            "key": ["key-1", "key-2"],
            "mac_addresses": ["00:50:56:aa:bb:01", "00:50:56:aa:bb:02", "00:50:56:aa:bb:03"],
            "type": ["virtualMachine", "host"],
        }])


class ProvisionalIdTests(unittest.TestCase):
    def test_provisional_id_round_trip(self):
        d = ResourceData(_resource().schema)
        save_host_port_group_id(d, "host-10", "pg:with:colons")
        self.assertEqual(d.id(), "tf-HostPortGroup:host-10:pg:with:colons")
        self.assertEqual(port_group_ids_from_resource_id(d.id()), ("host-10", "pg:with:colons"))

    def test_durable_id_is_not_provisional(self):
        with self.assertRaises(ProviderError):
            port_group_ids_from_resource_id("network-42")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()

"""
Host network policy and port group spec structures.

Schema for the NIC teaming, security and traffic shaping policy shared by
host-level networking resources, and the expand/flatten functions that
convert between :class:`ResourceData` and pyVmomi data objects.
"""

from typing import List, Optional

from pyVmomi import vim

from vsphere_provider.schema import Attribute, AttributeType, ResourceData, Schema, merge_schema

HOST_NIC_TEAMING_POLICY_ALLOWED_VALUES = [
    "loadbalance_ip",
    "loadbalance_srcmac",
    "loadbalance_srcid",
    "failover_explicit",
]


def schema_host_network_policy() -> Schema:
    """Network policy attributes shared by virtual switches and port groups."""
    return {
        # HostNicFailureCriteria
        "check_beacon": Attribute(
            type=AttributeType.BOOL,
            optional=True,
            description="Enable beacon probing. Requires that the vSwitch has been configured to use a beacon. "
                        "If disabled, link status is used only.",
        ),
        # HostNicTeamingPolicy
        "teaming_policy": Attribute(
            type=AttributeType.STRING,
            optional=True,
            description="The network adapter teaming policy. Can be one of loadbalance_ip, loadbalance_srcmac, "
                        "loadbalance_srcid, or failover_explicit.",
            allowed_values=HOST_NIC_TEAMING_POLICY_ALLOWED_VALUES,
        ),
        "notify_switches": Attribute(
            type=AttributeType.BOOL,
            optional=True,
            description="If true, the teaming policy will notify the broadcast network of a NIC failover, "
                        "triggering cache updates.",
        ),
        "failback": Attribute(
            type=AttributeType.BOOL,
            optional=True,
            description="If true, the teaming policy will re-activate failed interfaces higher in precedence "
                        "than the standby adapter when they come back up.",
        ),
        # HostNicOrderPolicy
        "active_nics": Attribute(
            type=AttributeType.LIST,
            required=True,
            description="List of active network adapters used for load balancing.",
            elem=AttributeType.STRING,
        ),
        "standby_nics": Attribute(
            type=AttributeType.LIST,
            required=True,
            description="List of standby network adapters used for failover.",
            elem=AttributeType.STRING,
        ),
        # HostNetworkSecurityPolicy
        "allow_promiscuous": Attribute(
            type=AttributeType.BOOL,
            optional=True,
            description="Enable promiscuous mode on the network. This flag indicates whether or not all traffic "
                        "is seen on a given port.",
        ),
        "allow_forged_transmits": Attribute(
            type=AttributeType.BOOL,
            optional=True,
            description="Controls whether or not the virtual network adapter is allowed to send network traffic "
                        "with a different MAC address than that of its own.",
        ),
        "allow_mac_changes": Attribute(
            type=AttributeType.BOOL,
            optional=True,
            description="Controls whether or not the Media Access Control (MAC) address can be changed.",
        ),
        # HostNetworkTrafficShapingPolicy
        "shaping_average_bandwidth": Attribute(
            type=AttributeType.INT,
            optional=True,
            description="The average bandwidth in bits per second if traffic shaping is enabled.",
        ),
        "shaping_burst_size": Attribute(
            type=AttributeType.INT,
            optional=True,
            description="The maximum burst size allowed in bytes if traffic shaping is enabled.",
        ),
        "shaping_enabled": Attribute(
            type=AttributeType.BOOL,
            optional=True,
            description="Enable traffic shaping on this virtual switch or port group.",
        ),
        "shaping_peak_bandwidth": Attribute(
            type=AttributeType.INT,
            optional=True,
            description="The peak bandwidth during bursts in bits per second if traffic shaping is enabled.",
        ),
    }


def schema_host_port_group_spec() -> Schema:
    s = {
        # HostPortGroupSpec
        "name": Attribute(
            type=AttributeType.STRING,
            required=True,
            force_new=True,
            description="The name of the port group.",
        ),
        "vlan_id": Attribute(
            type=AttributeType.INT,
            optional=True,
            default=0,
            int_range=(0, 4095),
            description="The VLAN ID/trunk mode for this port group. An ID of 0 denotes no tagging, an ID of "
                        "1-4094 tags with the specific ID, and an ID of 4095 enables trunk mode, allowing the "
                        "guest to manage its own tagging.",
        ),
        "virtual_switch_name": Attribute(
            type=AttributeType.STRING,
            required=True,
            force_new=True,
            description="The name of the virtual switch to bind this port group to.",
        ),
    }
    merge_schema(s, schema_host_network_policy())
    return s


def _bool_ptr(d: ResourceData, key: str) -> Optional[bool]:
    value, exists = d.get_ok_exists(key)
    return value if exists else None


def _bool_ptr_reverse(d: ResourceData, key: str) -> Optional[bool]:
    value = _bool_ptr(d, key)
    return None if value is None else not value


def _int_ptr(d: ResourceData, key: str) -> Optional[int]:
    value, exists = d.get_ok_exists(key)
    return value if exists else None


def _set_if_not_none(d: ResourceData, key: str, value) -> None:
    if value is not None:
        d.set(key, value)


def expand_host_nic_failure_criteria(d: ResourceData):
    check_beacon = _bool_ptr(d, "check_beacon")
    if check_beacon is None:
        return None
    return vim.host.NetworkPolicy.NicFailureCriteria(checkBeacon=check_beacon)


def flatten_host_nic_failure_criteria(d: ResourceData, obj) -> None:
    _set_if_not_none(d, "check_beacon", obj.checkBeacon)


def expand_host_nic_order_policy(d: ResourceData):
    """NIC order is only sent when at least one of the NIC lists is configured."""
    active_nics, active_ok = d.get_ok_exists("active_nics")
    standby_nics, standby_ok = d.get_ok_exists("standby_nics")
    if not active_ok and not standby_ok:
        return None
    return vim.host.NetworkPolicy.NicOrderPolicy(
        activeNic=list(active_nics or []),
        standbyNic=list(standby_nics or []),
    )


def flatten_host_nic_order_policy(d: ResourceData, obj) -> None:
    if obj is None:
        return
    d.set("active_nics", _strings(obj.activeNic))
    d.set("standby_nics", _strings(obj.standbyNic))


def expand_host_nic_teaming_policy(d: ResourceData):
    policy, _ = d.get_ok("teaming_policy")
    obj = vim.host.NetworkPolicy.NicTeamingPolicy(
        policy=policy or None,
        notifySwitches=_bool_ptr(d, "notify_switches"),
        rollingOrder=_bool_ptr_reverse(d, "failback"),
        failureCriteria=expand_host_nic_failure_criteria(d),
        nicOrder=expand_host_nic_order_policy(d),
    )
    return obj


def flatten_host_nic_teaming_policy(d: ResourceData, obj) -> None:
    if obj.rollingOrder is not None:
        d.set("failback", not obj.rollingOrder)
    _set_if_not_none(d, "notify_switches", obj.notifySwitches)
    _set_if_not_none(d, "teaming_policy", obj.policy)
    if obj.failureCriteria is not None:
        flatten_host_nic_failure_criteria(d, obj.failureCriteria)
    flatten_host_nic_order_policy(d, obj.nicOrder)


def expand_host_network_security_policy(d: ResourceData):
    return vim.host.NetworkPolicy.SecurityPolicy(
        allowPromiscuous=_bool_ptr(d, "allow_promiscuous"),
        forgedTransmits=_bool_ptr(d, "allow_forged_transmits"),
        macChanges=_bool_ptr(d, "allow_mac_changes"),
    )


def flatten_host_network_security_policy(d: ResourceData, obj) -> None:
    _set_if_not_none(d, "allow_promiscuous", obj.allowPromiscuous)
    _set_if_not_none(d, "allow_forged_transmits", obj.forgedTransmits)
    _set_if_not_none(d, "allow_mac_changes", obj.macChanges)


def expand_host_network_traffic_shaping_policy(d: ResourceData):
    return vim.host.NetworkPolicy.TrafficShapingPolicy(
        enabled=_bool_ptr(d, "shaping_enabled"),
        averageBandwidth=_int_ptr(d, "shaping_average_bandwidth"),
        peakBandwidth=_int_ptr(d, "shaping_peak_bandwidth"),
        burstSize=_int_ptr(d, "shaping_burst_size"),
    )


def flatten_host_network_traffic_shaping_policy(d: ResourceData, obj) -> None:
    _set_if_not_none(d, "shaping_enabled", obj.enabled)
    _set_if_not_none(d, "shaping_average_bandwidth", _int_or_none(obj.averageBandwidth))
    _set_if_not_none(d, "shaping_peak_bandwidth", _int_or_none(obj.peakBandwidth))
    _set_if_not_none(d, "shaping_burst_size", _int_or_none(obj.burstSize))


def expand_host_network_policy(d: ResourceData):
    return vim.host.NetworkPolicy(
        security=expand_host_network_security_policy(d),
        nicTeaming=expand_host_nic_teaming_policy(d),
        shapingPolicy=expand_host_network_traffic_shaping_policy(d),
    )


def flatten_host_network_policy(d: ResourceData, obj) -> None:
    if obj.security is not None:
        flatten_host_network_security_policy(d, obj.security)
    if obj.nicTeaming is not None:
        flatten_host_nic_teaming_policy(d, obj.nicTeaming)
    if obj.shapingPolicy is not None:
        flatten_host_network_traffic_shaping_policy(d, obj.shapingPolicy)


def expand_host_port_group_spec(d: ResourceData):
    return vim.host.PortGroup.Specification(
        name=d.get("name"),
        vlanId=d.get("vlan_id"),
        vswitchName=d.get("virtual_switch_name"),
        policy=expand_host_network_policy(d),
    )


def flatten_host_port_group_spec(d: ResourceData, obj) -> None:
    d.set("name", obj.name)
    d.set("vlan_id", int(obj.vlanId))
    d.set("virtual_switch_name", obj.vswitchName)
    flatten_host_network_policy(d, obj.policy)


def _strings(values) -> List[str]:
    return [str(v) for v in (values or [])]


def _int_or_none(value) -> Optional[int]:
    # long fields come back as pyVmomi's long type
    return None if value is None else int(value)

"""
Host port group helpers.

Lookup of live port groups on a HostNetworkSystem, the provisional resource
id used between creation and the first read, and the derived
``computed_policy`` / ``ports`` views.
"""

from typing import Any, Dict, List, Tuple

from vsphere_provider.config import HOST_PORT_GROUP_ID_PREFIX
from vsphere_provider.errors import PortGroupNotFoundError, ProviderError
from vsphere_provider.helpers.network_policy import flatten_host_network_policy, schema_host_network_policy
from vsphere_provider.schema import Attribute, AttributeType, ResourceData, Schema

# Placeholder id of the throwaway resource data used to flatten the effective policy
EFFECTIVE_POLICY_ID = "effectivepolicy"


def save_host_port_group_id(d: ResourceData, host_system_id: str, name: str) -> None:
    """Store the provisional id; the first read replaces it with the network's MoRef."""
    d.set_id(f"{HOST_PORT_GROUP_ID_PREFIX}:{host_system_id}:{name}")


def port_group_ids_from_resource_id(resource_id: str) -> Tuple[str, str]:
    """
    Split a provisional id back into (host_system_id, name).

    Raises:
        ProviderError: if ``resource_id`` is not a provisional port group id
    """
    parts = resource_id.split(":", 2)
    if len(parts) != 3 or parts[0] != HOST_PORT_GROUP_ID_PREFIX:
        raise ProviderError(f"do not know how to handle resource ID {resource_id!r}")
    return parts[1], parts[2]


def host_port_group_from_name(client, ns, name: str):
    """
    Fetch a live ``vim.host.PortGroup`` from a host network system by name.

    Raises:
        ProviderError: if the network info cannot be retrieved
        PortGroupNotFoundError: if no port group has that name
    """
    try:
        port_groups = client.call(lambda: list(ns.networkInfo.portgroup))
    except Exception as e:
        raise ProviderError(f"error fetching host network properties: {e}") from e

    for pg in port_groups:
        if pg.spec.name == name:
            return pg
    raise PortGroupNotFoundError(name)


def port_group_port_schema() -> Schema:
    return {
        "key": Attribute(
            type=AttributeType.LIST,
            computed=True,
            description="The linkable identifier for this port entry.",
            elem=AttributeType.STRING,
        ),
        "mac_addresses": Attribute(
            type=AttributeType.LIST,
            computed=True,
            description="The MAC addresses of the network service of the virtual machine connected on this port.",
            elem=AttributeType.STRING,
        ),
        "type": Attribute(
            type=AttributeType.LIST,
            computed=True,
            description="The type of the entity connected on this port. Possible values are host (VMKkernel), "
                        "systemManagement (service console), virtualMachine, or unknown.",
            elem=AttributeType.STRING,
        ),
    }


def calculate_ports(ports) -> List[Dict[str, List[str]]]:
    """Collapse the port list into the single-item ``ports`` attribute."""
    keys: List[str] = []
    macs: List[str] = []
    types: List[str] = []
    for port in ports or []:
        keys.append(port.key)
        macs.extend(port.mac or [])
        types.append(port.type)
    return [{"key": keys, "mac_addresses": macs, "type": types}]


def calculate_computed_policy(policy) -> Dict[str, str]:
    """
    Flatten an effective (inherited) network policy into a flat string map.

    Lists become ``<name>.#`` plus ``<name>.<index>`` entries and booleans
    ``true``/``false``.
    """
    cpd = ResourceData(schema_host_network_policy())
    cpd.set_id(EFFECTIVE_POLICY_ID)
    if policy is not None:
        flatten_host_network_policy(cpd, policy)

    state = cpd.state() or {}
    state.pop("id", None)
    return _flatmap(state)


def _flatmap(values: Dict[str, Any]) -> Dict[str, str]:
    result: Dict[str, str] = {}
    for key, value in values.items():
        if isinstance(value, list):
            result[f"{key}.#"] = str(len(value))
            for i, item in enumerate(value):
                result[f"{key}.{i}"] = _flat_scalar(item)
        else:
            result[key] = _flat_scalar(value)
    return result


def _flat_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)

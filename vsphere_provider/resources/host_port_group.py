"""
vsphere_host_port_group resource.

Manages a port group on a standard virtual switch of a single ESXi host
through the host's HostNetworkSystem.

Lifecycle:
    create  AddPortGroup, provisional id ``tf-HostPortGroup:<host>:<name>``, then read
    read    flatten the live spec; the id becomes the network's MoRef value
    update  UpdatePortGroup by name, then read
    delete  RemovePortGroup by name
"""

import logging
from typing import Tuple

from vsphere_provider.client import VSphereClient
from vsphere_provider.errors import ConfigResolutionError, NetworkNotFoundError, PortGroupNotFoundError, \
    ProviderError, RemoteOperationError
from vsphere_provider.helpers.datacenter import datacenter_from_id
from vsphere_provider.helpers.finder import network_list
from vsphere_provider.helpers.host_system import host_network_system_from_host_system_id
from vsphere_provider.helpers.network_policy import expand_host_port_group_spec, flatten_host_port_group_spec, \
    schema_host_port_group_spec
from vsphere_provider.helpers.port_group import calculate_computed_policy, calculate_ports, \
    host_port_group_from_name, port_group_ids_from_resource_id, port_group_port_schema, save_host_port_group_id
from vsphere_provider.schema import Attribute, AttributeType, Resource, ResourceData, merge_schema

logger = logging.getLogger(__name__)

RESOURCE_TYPE = "vsphere_host_port_group"


def resource_vsphere_host_port_group() -> Resource:
    s = {
        "host_system_id": Attribute(
            type=AttributeType.STRING,
            description="The managed object ID of the host to set the port group up on.",
            required=True,
            force_new=True,
        ),
        "datacenter_id": Attribute(
            type=AttributeType.STRING,
            description="The managed object ID of the datacenter the host belongs to.",
            required=True,
            force_new=True,
        ),
        "computed_policy": Attribute(
            type=AttributeType.MAP,
            description="The effective network policy after inheritance. Note that this will look similar to, "
                        "but is not the same, as the policy attributes defined in this resource.",
            computed=True,
            elem=AttributeType.STRING,
        ),
        "key": Attribute(
            type=AttributeType.STRING,
            description="The linkable identifier for this port group.",
            computed=True,
        ),
        "ports": Attribute(
            type=AttributeType.LIST,
            description="The ports that currently exist and are used on this port group.",
            computed=True,
            max_items=1,
            elem=port_group_port_schema(),
        ),
    }
    merge_schema(s, schema_host_port_group_spec())

    # NIC order is inherited from the virtual switch unless overridden here
    for key in ("active_nics", "standby_nics"):
        s[key] = s[key].model_copy(update={"required": False, "optional": True})

    return Resource(
        schema=s,
        create=resource_vsphere_host_port_group_create,
        read=resource_vsphere_host_port_group_read,
        update=resource_vsphere_host_port_group_update,
        delete=resource_vsphere_host_port_group_delete,
        description="Manages a port group on a host-level standard virtual switch.",
    )


def _port_group_ids(d: ResourceData) -> Tuple[str, str]:
    """Host system id and port group name, falling back to a provisional id."""
    hs_id = d.get("host_system_id")
    name = d.get("name")
    if (not hs_id or not name) and d.id():
        hs_id, name = port_group_ids_from_resource_id(d.id())
    return hs_id, name


def _network_system(client: VSphereClient, hs_id: str, what: str):
    try:
        return host_network_system_from_host_system_id(client, hs_id)
    except ConfigResolutionError as e:
        raise ConfigResolutionError(f"error loading {what}: {e.message}") from e


def resource_vsphere_host_port_group_create(d: ResourceData, client: VSphereClient) -> None:
    name = d.get("name")
    hs_id = d.get("host_system_id")
    ns = _network_system(client, hs_id, "network system")

    spec = expand_host_port_group_spec(d)
    logger.info(f"Adding port group {name} on host {hs_id}")
    try:
        client.call(ns.AddPortGroup, portgrp=spec)
    except Exception as e:
        raise RemoteOperationError("adding port group", e) from e

    save_host_port_group_id(d, hs_id, name)
    resource_vsphere_host_port_group_read(d, client)


def resource_vsphere_host_port_group_read(d: ResourceData, client: VSphereClient) -> None:
    hs_id, name = _port_group_ids(d)
    ns = _network_system(client, hs_id, "host network system")

    try:
        pg = host_port_group_from_name(client, ns, name)
    except PortGroupNotFoundError:
        logger.warning(f"Port group {name} no longer exists on host {hs_id}, removing from state")
        d.set_id("")
        return
    except ProviderError as e:
        raise ProviderError(f"error fetching port group data: {e.message}") from e

    try:
        flatten_host_port_group_spec(d, pg.spec)
    except ProviderError as e:
        raise ProviderError(f"error setting resource data: {e.message}") from e
    d.set("host_system_id", hs_id)
    d.set("key", pg.key)

    dc = None
    dc_id, ok = d.get_ok("datacenter_id")
    if ok:
        try:
            dc = datacenter_from_id(client, dc_id)
        except ConfigResolutionError as e:
            raise ConfigResolutionError(f"cannot locate datacenter: {e.message}") from e

    try:
        networks = network_list(client, name, datacenter=dc)
    except Exception as e:
        raise ProviderError(f"error searching for network {name}: {e}") from e
    if not networks:
        raise NetworkNotFoundError(name)

    network_id = str(networks[0]._moId)
    d.set_id(network_id)
    logger.debug(f"Network ID is {network_id}")

    d.set("computed_policy", calculate_computed_policy(pg.computedPolicy))
    d.set("ports", calculate_ports(pg.port))


def resource_vsphere_host_port_group_update(d: ResourceData, client: VSphereClient) -> None:
    hs_id, name = _port_group_ids(d)
    ns = _network_system(client, hs_id, "host network system")

    spec = expand_host_port_group_spec(d)
    logger.info(f"Updating port group {name} on host {hs_id}")
    try:
        client.call(ns.UpdatePortGroup, pgName=name, portgrp=spec)
    except Exception as e:
        raise RemoteOperationError("updating port group", e) from e

    resource_vsphere_host_port_group_read(d, client)


def resource_vsphere_host_port_group_delete(d: ResourceData, client: VSphereClient) -> None:
    hs_id, name = _port_group_ids(d)
    ns = _network_system(client, hs_id, "host network system")

    logger.info(f"Removing port group {name} from host {hs_id}")
    try:
        client.call(ns.RemovePortGroup, pgName=name)
    except Exception as e:
        raise RemoteOperationError("deleting port group", e) from e

    d.set_id("")

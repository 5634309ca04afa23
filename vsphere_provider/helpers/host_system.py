"""Host system lookups"""

import logging

from pyVmomi import vim

from vsphere_provider.errors import ConfigResolutionError

logger = logging.getLogger(__name__)


def host_system_from_id(client, host_system_id: str):
    """
    Locate a HostSystem by managed object ID.

    Raises:
        ConfigResolutionError: if no host with that ID exists or the lookup fails
    """
    try:
        host = client.find_by_moid(vim.HostSystem, host_system_id)
    except Exception as e:
        raise ConfigResolutionError(f"error locating host system {host_system_id}: {e}") from e
    if host is None:
        raise ConfigResolutionError(f"host system {host_system_id} not found")
    return host


def host_network_system_from_host_system_id(client, host_system_id: str):
    """Return the HostNetworkSystem managing networking on the given host."""
    host = host_system_from_id(client, host_system_id)
    try:
        ns = client.call(lambda: host.configManager.networkSystem)
    except Exception as e:
        raise ConfigResolutionError(
            f"error loading network system for host {host_system_id}: {e}"
        ) from e
    if ns is None:
        raise ConfigResolutionError(f"host {host_system_id} has no network system")
    logger.debug(f"Resolved network system for host {host_system_id}")
    return ns

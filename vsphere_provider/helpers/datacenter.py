"""Datacenter lookups"""

from pyVmomi import vim

from vsphere_provider.errors import ConfigResolutionError


def datacenter_from_id(client, datacenter_id: str):
    """
    Locate a Datacenter by managed object ID.

    Raises:
        ConfigResolutionError: if no datacenter with that ID exists or the lookup fails
    """
    try:
        dc = client.find_by_moid(vim.Datacenter, datacenter_id)
    except Exception as e:
        raise ConfigResolutionError(f"error locating datacenter {datacenter_id}: {e}") from e
    if dc is None:
        raise ConfigResolutionError(f"datacenter {datacenter_id} not found")
    return dc

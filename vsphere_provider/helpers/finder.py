"""Inventory search for network objects"""

import fnmatch
import logging
from typing import List

from pyVmomi import vim

logger = logging.getLogger(__name__)


def network_list(client, name: str, datacenter=None) -> List:
    """
    Find networks whose name matches ``name``.

    ``name`` may be a glob pattern. The search covers the datacenter's network
    folder when a datacenter is given, otherwise the whole inventory.

    Returns:
        Matching network objects (standard port groups, DVS port groups and
        opaque networks), in inventory order
    """
    content = client.content
    if datacenter is not None:
        container = client.call(lambda: datacenter.networkFolder)
    else:
        container = content.rootFolder

    view = client.call(content.viewManager.CreateContainerView, container, [vim.Network], True)
    try:
        networks = client.call(lambda: [(net, net.name) for net in view.view])
    finally:
        client.call(view.Destroy)

    matches = [net for net, net_name in networks if fnmatch.fnmatchcase(net_name, name)]
    logger.debug(f"Network search for {name!r} matched {len(matches)} of {len(networks)} networks")
    return matches

"""Resources exposed by the vSphere provider"""

from .host_port_group import RESOURCE_TYPE as HOST_PORT_GROUP, resource_vsphere_host_port_group

__all__ = ['HOST_PORT_GROUP', 'resource_vsphere_host_port_group']

"""
vSphere Provider - declarative management of host-level vSphere networking.

Provides:
- vsphere_host_port_group resource (create/read/update/delete)
- Drift detection by reading live port group state back from the host
"""

__version__ = "1.0.0"

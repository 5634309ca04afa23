"""vCenter connection mixin for the provider client"""

import atexit
import socket
import ssl

from pyVim.connect import SmartConnect, Disconnect
from pyVmomi import vim

from vsphere_provider.config import CONNECT_TIMEOUT


class VCenterConnectionMixin:
    """Mixin providing vCenter session handling.

    Expects the host class to define ``settings``, ``vcenter_conn`` and ``log``.
    """

    def connect_vcenter(self, force_reconnect=False):
        """Connect to vCenter if not already connected, with session validation.

        Args:
            force_reconnect: If True, disconnect existing connection and reconnect

        Returns:
            vCenter service instance or None if connection fails
        """
        if self.vcenter_conn and not force_reconnect:
            if self.check_vcenter_connection():
                return self.vcenter_conn
            self.log("vCenter session expired, reconnecting...", "WARN")

        if self.vcenter_conn:
            self.disconnect_vcenter()

        host = self.settings.server
        self.log(f"Attempting to connect to vCenter at {host}...")

        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        if self.settings.allow_unverified_ssl:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        else:
            context.load_default_certs()

        try:
            old_timeout = socket.getdefaulttimeout()
            socket.setdefaulttimeout(CONNECT_TIMEOUT)
            try:
                self.vcenter_conn = SmartConnect(
                    host=host,
                    user=self.settings.user,
                    pwd=self.settings.password,
                    port=self.settings.port,
                    sslContext=context
                )
            finally:
                socket.setdefaulttimeout(old_timeout)

            atexit.register(Disconnect, self.vcenter_conn)
            self.log(f"\u2713 Connected to vCenter at {host}")
            return self.vcenter_conn
        except Exception as e:
            self.log(f"\u2717 Failed to connect to vCenter: {e}", "ERROR")
            self.vcenter_conn = None
            return None

    def ensure_vcenter_connection(self):
        """Return a live connection, reconnecting if the session has lapsed."""
        if not self.vcenter_conn:
            return self.connect_vcenter()
        if self.check_vcenter_connection():
            return self.vcenter_conn
        return self.connect_vcenter(force_reconnect=True)

    def check_vcenter_connection(self) -> bool:
        """Verify vCenter connection is still valid"""
        try:
            content = self.vcenter_conn.RetrieveContent()
            return content.sessionManager.currentSession is not None
        except vim.fault.NotAuthenticated:
            self.log("vCenter session not authenticated", "WARN")
            return False
        except Exception as e:
            self.log(f"vCenter connection lost: {e}", "WARN")
            return False

    def disconnect_vcenter(self):
        if not self.vcenter_conn:
            return
        atexit.unregister(Disconnect)
        try:
            Disconnect(self.vcenter_conn)
        except Exception as e:
            self.log(f"Error while disconnecting from vCenter: {e}", "DEBUG")
        self.vcenter_conn = None

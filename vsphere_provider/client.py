"""
vSphere client handle passed to every resource callback.

The client is the provider's "meta" value: callbacks receive it explicitly
and never reach for a module-level connection.
"""

import concurrent.futures
import logging
from typing import Any, Callable, Optional

from vsphere_provider.config import Settings, settings as default_settings
from vsphere_provider.errors import ProviderError
from vsphere_provider.mixins import VCenterConnectionMixin
from vsphere_provider.utils import _normalize_unicode

logger = logging.getLogger(__name__)

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class VSphereClient(VCenterConnectionMixin):
    """Connection to vCenter plus helpers for bounded remote calls"""

    def __init__(self, settings: Optional[Settings] = None, service_instance=None):
        """
        Initialize the client.

        Args:
            settings: Connection settings (defaults to environment settings)
            service_instance: An already connected service instance, if any
        """
        self.settings = settings or default_settings
        self.vcenter_conn = service_instance
        self.api_timeout = self.settings.api_timeout

    def log(self, message: str, level: str = "INFO"):
        logger.log(_LEVELS.get(level.upper(), logging.INFO), _normalize_unicode(message))

    @property
    def content(self):
        """ServiceContent of the connected vCenter"""
        if not self.vcenter_conn:
            raise ProviderError("not connected to vCenter")
        return self.vcenter_conn.RetrieveContent()

    def call(self, fn: Callable, *args, **kwargs) -> Any:
        """
        Run a single remote call bounded by ``api_timeout``.

        The worker thread is abandoned on expiry; pyVmomi calls cannot be
        interrupted from the outside.

        Raises:
            TimeoutError: if the call does not return within ``api_timeout``
        """
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(fn, *args, **kwargs)
            try:
                return future.result(timeout=self.api_timeout)
            except concurrent.futures.TimeoutError:
                future.cancel()
                raise TimeoutError(f"operation timed out after {self.api_timeout}s")
        finally:
            executor.shutdown(wait=False)

    def find_by_moid(self, vimtype, moid: str, container=None):
        """
        Find a managed object of ``vimtype`` by its managed object ID.

        Args:
            vimtype: pyVmomi type, e.g. ``vim.HostSystem``
            moid: Managed object ID, e.g. ``host-42``
            container: Folder to search (defaults to the root folder)

        Returns:
            The managed object, or None when nothing matches
        """
        content = self.content
        view = self.call(
            content.viewManager.CreateContainerView, container or content.rootFolder, [vimtype], True
        )
        try:
            for obj in self.call(lambda: list(view.view)):
                if str(obj._moId) == moid:
                    return obj
        finally:
            self.call(view.Destroy)
        return None

"""
Provider entry point.

Owns the resource registry and the vCenter client, and drives the
create / update / replace / refresh / destroy decisions for a resource
given its configuration and previously recorded state.
"""

import logging
from typing import Any, Dict, Optional

from vsphere_provider.client import VSphereClient
from vsphere_provider.config import Settings, settings as default_settings
from vsphere_provider.errors import ConfigResolutionError, ProviderError
from vsphere_provider.resources import HOST_PORT_GROUP, resource_vsphere_host_port_group
from vsphere_provider.schema import Resource

logger = logging.getLogger(__name__)

State = Optional[Dict[str, Any]]


class Provider:
    """vSphere provider: resource registry plus lifecycle driver"""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[VSphereClient] = None):
        self.settings = settings or default_settings
        self.client = client
        self.resources: Dict[str, Resource] = {
            HOST_PORT_GROUP: resource_vsphere_host_port_group(),
        }

    def configure(self) -> VSphereClient:
        """Connect to vCenter, reusing the client's session when still valid."""
        if self.client is None:
            self.client = VSphereClient(self.settings)
        if not self.client.ensure_vcenter_connection():
            raise ConfigResolutionError(f"cannot connect to vCenter at {self.settings.server}")
        return self.client

    def resource(self, type_name: str) -> Resource:
        try:
            return self.resources[type_name]
        except KeyError:
            raise ProviderError(f"unsupported resource type {type_name!r}") from None

    def _client(self) -> VSphereClient:
        if self.client is not None and self.client.vcenter_conn is not None:
            return self.client
        return self.configure()

    def apply(self, type_name: str, config: Dict[str, Any], prior_state: State = None) -> State:
        """
        Converge a resource on ``config``.

        Args:
            type_name: Resource type, e.g. ``vsphere_host_port_group``
            config: Desired attributes
            prior_state: State returned by a previous apply/refresh, or None

        Returns:
            The new state, or None if the resource disappeared while reading it back
        """
        resource = self.resource(type_name)
        config = resource.validate_config(config)

        if not prior_state:
            return self._create(type_name, resource, config)

        replace = resource.force_new_changes(prior_state, config)
        if replace:
            logger.info(f"{type_name} {prior_state.get('id')}: {', '.join(replace)} changed, replacing")
            self.destroy(type_name, prior_state)
            return self._create(type_name, resource, config)

        if resource.has_changes(prior_state, config):
            if resource.update is None:
                raise ProviderError(f"{type_name} does not support in-place updates")
            logger.info(f"{type_name} {prior_state.get('id')}: updating in place")
            d = resource.data(config=config, state=prior_state)
            resource.update(d, self._client())
            return d.state()

        return self.refresh(type_name, prior_state)

    def _create(self, type_name: str, resource: Resource, config: Dict[str, Any]) -> State:
        logger.info(f"{type_name}: creating")
        d = resource.data(config=config)
        resource.create(d, self._client())
        return d.state()

    def refresh(self, type_name: str, state: Dict[str, Any]) -> State:
        """Re-read live state; None means the object is gone."""
        resource = self.resource(type_name)
        d = resource.data(state=state)
        resource.read(d, self._client())
        return d.state()

    def destroy(self, type_name: str, state: Dict[str, Any]) -> None:
        resource = self.resource(type_name)
        d = resource.data(state=state)
        resource.delete(d, self._client())
        logger.info(f"{type_name} {state.get('id')}: destroyed")

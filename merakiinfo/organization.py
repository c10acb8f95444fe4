"""Find organizations and their networks, licenses, and device statuses."""

import logging

from .exceptions import MerakiAPIError
from .models import License, Network, Organization
from .transport import Transport
from .utility import DEFAULT_PAGE_SIZE, resolve_identifier


class Organizations:
    """Use the organizations visible to an API key.

    :param Transport transport: the session with the API
    :param logging.Logger logger: optional logger, default is the transport's logger
    """

    def __init__(self, transport: Transport, logger: logging.Logger = None):
        """Initialize with a transport."""
        self.transport = transport
        self.logger = logger or transport.logger

    def find_organizations(self):
        """Find all organizations accessible with the API key."""
        try:
            organizations = self.transport.get_collection('/organizations', params={'perPage': DEFAULT_PAGE_SIZE})
        except MerakiAPIError as e:
            raise MerakiAPIError(f"failed to get organizations, caught {e}") from e
        return [Organization.from_api(o) for o in organizations]

    def get_organization(self, organization_id: str):
        """
        Get a single organization by ID from the listing.

        :param organization_id: the ID of the org
        """
        for organization in self.find_organizations():
            if organization.id == organization_id:
                return organization
        raise MerakiAPIError(f"organization {organization_id} is not accessible with this API key")

    def find_networks(self, organization_id: str):
        """Find networks by organization as a collection.

        :param str organization_id: the ID of the org
        """
        url = f"/organizations/{organization_id}/networks"
        try:
            networks = self.transport.get_collection(url, params={'perPage': DEFAULT_PAGE_SIZE})
        except MerakiAPIError as e:
            raise MerakiAPIError(f"failed to get networks for organization {organization_id}, caught {e}") from e
        found = list()
        for n in networks:
            network = Network.from_api(n)
            if not network.organization_id:
                network.organization_id = organization_id
            found.append(network)
        self.logger.debug(f"found {len(found)} networks in organization {organization_id}")
        return found

    def get_network(self, organization_id: str, network_id: str):
        """Describe a network by ID from the organization's listing."""
        for network in self.find_networks(organization_id):
            if network.id == network_id:
                return network
        raise MerakiAPIError(f"network {network_id} is not in organization {organization_id}")

    def resolve_organization_id(self, organization: str):
        """Resolve an organization ID or case-insensitive name to an ID.

        :param organization: an ID or name, empty means no organization and resolves to empty without any API call
        """
        if not organization:
            return ""
        return resolve_identifier(
            organization,
            candidates=self.find_organizations(),
            kind='organization',
            logger=self.logger)

    def resolve_network_id(self, organization_id: str, network: str):
        """Resolve a network ID or case-insensitive name to an ID within an organization.

        :param organization_id: the ID of the org to search
        :param network: an ID or name, empty means every network and resolves to empty without any API call
        """
        if not network:
            return ""
        return resolve_identifier(
            network,
            candidates=self.find_networks(organization_id),
            kind='network',
            scope=organization_id,
            logger=self.logger)

    def get_licenses(self, organization_id: str):
        """Get the licenses of an organization.

        Licenses without a networkId apply to the whole organization.

        :param organization_id: the ID of the org
        """
        url = f"/organizations/{organization_id}/licenses"
        try:
            licenses = self.transport.get_collection(url, params={'perPage': DEFAULT_PAGE_SIZE})
        except MerakiAPIError as e:
            raise MerakiAPIError(f"failed to get licenses for organization {organization_id}, caught {e}") from e
        return [License.from_api(lic) for lic in licenses]

    def get_device_statuses(self, organization_id: str):
        """Map each device serial to the status reported by the organization-wide status endpoint.

        :param organization_id: the ID of the org
        """
        url = f"/organizations/{organization_id}/devices/statuses"
        try:
            statuses = self.transport.get_collection(url, params={'perPage': DEFAULT_PAGE_SIZE})
        except MerakiAPIError as e:
            raise MerakiAPIError(f"failed to get device statuses for organization {organization_id}, caught {e}") from e
        return {s['serial']: s.get('status') or '' for s in statuses if s.get('serial')}

"""Fan fetches out across the networks of one or every organization."""

import logging

from .exceptions import MerakiAPIError, MerakiConfigError
from .models import NetworkLicenses, NetworkRoutes
from .network import Network
from .organization import Organizations
from .transport import Transport
from .utility import COMMANDS, is_alerting, is_down, license_belongs_to_network


def get_all_network_routes(orgs: Organizations, organization_id: str, networks: list = None):
    """Get the routing table of every network in an organization.

    A network whose routes could not be fetched is kept with no routes.

    :param orgs: the organizations fetcher
    :param organization_id: the ID of the org
    :param networks: optional network listing of the org if already fetched
    """
    if networks is None:
        networks = orgs.find_networks(organization_id)
    orgs.logger.info(f"found {len(networks)} networks in organization {organization_id}")
    all_network_routes = list()
    for network in networks:
        try:
            routes = Network(orgs.transport, network.id, logger=orgs.logger).get_routes()
        except MerakiAPIError as e:
            orgs.logger.warning(f"failed to get routes for network {network.name} ({network.id}), caught {e}")
            routes = list()
        all_network_routes.append(NetworkRoutes(network=network, routes=routes))
    return all_network_routes


def get_all_network_licenses(orgs: Organizations, organization_id: str, networks: list = None):
    """Attribute the licenses of an organization to each of its networks.

    Organization-wide licenses, those without a networkId, are attributed to
    every network. If the licenses could not be fetched every network is kept
    with none.
    """
    if networks is None:
        networks = orgs.find_networks(organization_id)
    try:
        licenses = orgs.get_licenses(organization_id)
    except MerakiAPIError as e:
        orgs.logger.warning(f"failed to get licenses for organization {organization_id}, caught {e}")
        licenses = list()
    return [
        NetworkLicenses(network=network, licenses=[lic for lic in licenses if license_belongs_to_network(lic, network.id)])
        for network in networks
    ]


def get_device_statuses(orgs: Organizations, organization_id: str):
    """Get the organization-wide device statuses or None to fall back to the listed statuses."""
    try:
        return orgs.get_device_statuses(organization_id)
    except MerakiAPIError as e:
        orgs.logger.warning(f"falling back to the status each device is listed with, caught {e}")
        return None


def select_devices(devices: list, statuses: dict, command: str):
    """Keep the devices that are down or alerting.

    :param devices: devices as listed by their network
    :param statuses: serial to status map from the organization, devices missing from it keep their listed status
    :param command: down or alerting
    """
    matches = is_alerting if command == 'alerting' else is_down
    selected = list()
    for device in devices:
        if statuses and device.serial in statuses:
            device.status = statuses[device.serial]
        if matches(device.status):
            selected.append(device)
    return selected


class Aggregator:
    """Collect the records of one command for one network, one organization, or every organization.

    :param Transport transport: the session with the API
    :param logging.Logger logger: optional logger, default is the transport's logger
    """

    def __init__(self, transport: Transport, logger: logging.Logger = None):
        """Initialize with a transport."""
        self.transport = transport
        self.logger = logger or transport.logger
        self.orgs = Organizations(transport, logger=self.logger)

    def collect(self, command: str, organization_id: str = "", network_id: str = "", consolidate: bool = False):
        """Return a flat list of records for a command.

        :param command: one of route-tables, licenses, down, alerting
        :param organization_id: the ID of the org, required unless consolidating
        :param network_id: optional ID of a single network
        :param consolidate: annotate records with their organization and network and, without an org, include every org
        """
        if command not in COMMANDS or command == 'access':
            raise MerakiConfigError(f"cannot collect records for command '{command}'")
        if consolidate:
            return self.collect_consolidated(command, organization_id)
        if not organization_id:
            raise MerakiConfigError("an organization is required unless consolidating every organization")
        return self.collect_single(command, organization_id, network_id)

    def collect_single(self, command: str, organization_id: str, network_id: str = ""):
        """Return unannotated records of one network or one organization."""
        if command == 'licenses':
            licenses = self.orgs.get_licenses(organization_id)
            if network_id:
                licenses = [lic for lic in licenses if license_belongs_to_network(lic, network_id)]
            return licenses

        if network_id:
            network_ids = [network_id]
        else:
            network_ids = [n.id for n in self.orgs.find_networks(organization_id)]

        if command == 'route-tables':
            records = list()
            for nid in network_ids:
                try:
                    records.extend(Network(self.transport, nid, logger=self.logger).get_routes())
                except MerakiAPIError as e:
                    if network_id:
                        raise
                    self.logger.warning(f"failed to get routes for network {nid}, caught {e}")
            return records

        statuses = get_device_statuses(self.orgs, organization_id)
        records = list()
        for nid in network_ids:
            try:
                devices = Network(self.transport, nid, logger=self.logger).get_devices()
            except MerakiAPIError as e:
                if network_id:
                    raise
                self.logger.warning(f"failed to get devices for network {nid}, caught {e}")
                continue
            records.extend(select_devices(devices, statuses, command))
        return records

    def collect_consolidated(self, command: str, organization_id: str = ""):
        """Return records annotated with their organization and network.

        A failed organization is skipped when every organization is included
        but raised when it is the only one.
        """
        if organization_id:
            organizations = [self.orgs.get_organization(organization_id)]
        else:
            organizations = self.orgs.find_organizations()
            self.logger.info(f"found {len(organizations)} organizations")

        records = list()
        for organization in organizations:
            try:
                networks = self.orgs.find_networks(organization.id)
            except MerakiAPIError as e:
                if organization_id:
                    raise
                self.logger.warning(f"skipping organization {organization.name} ({organization.id}), caught {e}")
                continue
            records.extend(self.collect_organization(command, organization, networks))
        return records

    def collect_organization(self, command: str, organization, networks: list):
        """Return annotated records for each network of one organization."""
        records = list()
        if command == 'route-tables':
            for network_routes in get_all_network_routes(self.orgs, organization.id, networks):
                records.extend(r.with_scope(organization, network_routes.network) for r in network_routes.routes)
        elif command == 'licenses':
            for network_licenses in get_all_network_licenses(self.orgs, organization.id, networks):
                records.extend(lic.with_scope(organization, network_licenses.network) for lic in network_licenses.licenses)
        else:
            statuses = get_device_statuses(self.orgs, organization.id)
            for network in networks:
                try:
                    devices = Network(self.transport, network.id, logger=self.logger).get_devices()
                except MerakiAPIError as e:
                    self.logger.warning(f"failed to get devices for network {network.name} ({network.id}), caught {e}")
                    continue
                records.extend(d.with_scope(organization, network) for d in select_devices(devices, statuses, command))
        return records

    def access_summary(self, organization_id: str = ""):
        """List the accessible organizations, each with its networks.

        :param organization_id: optionally only this org
        :returns: a list of (organization, networks) pairs, networks is None if they could not be listed
        """
        summary = list()
        for organization in self.orgs.find_organizations():
            if organization_id and organization.id != organization_id:
                continue
            try:
                networks = self.orgs.find_networks(organization.id)
            except MerakiAPIError as e:
                self.logger.warning(f"failed to get networks for organization {organization.name} ({organization.id}), caught {e}")
                networks = None
            summary.append((organization, networks))
        return summary


def collect(transport: Transport, command: str, organization_id: str = "", network_id: str = "", consolidate: bool = False):
    """Collect the records of a command, see Aggregator.collect."""
    return Aggregator(transport).collect(command, organization_id, network_id, consolidate)


def access_summary(transport: Transport, organization_id: str = ""):
    """List the accessible organizations with their networks, see Aggregator.access_summary."""
    return Aggregator(transport).access_summary(organization_id)

"""Records fetched from the Dashboard API.

Attributes are snake_case. Records are built from and rendered back to the API's
camelCase property names, so the output uses the same names as the API.
"""

from dataclasses import dataclass, field, fields
from typing import Any, List, Optional

from .utility import snake2camel


@dataclass
class Record:
    """Parent class of all records.

    Sub-classes name their kind for the renderer and may list fields that
    should lead the rendered record.
    """

    kind = 'record'
    leading_fields = ()

    @classmethod
    def from_api(cls, data: dict):
        """Build a record from an API object, missing properties keep their defaults."""
        kwargs = dict()
        for f in fields(cls):
            key = snake2camel(f.name)
            if key in data:
                kwargs[f.name] = data[key]
        return cls(**kwargs)

    def to_dict(self):
        """Return the record keyed by API property names, leading fields first."""
        names = [f.name for f in fields(self)]
        ordered = [n for n in self.leading_fields if n in names] + [n for n in names if n not in self.leading_fields]
        return {snake2camel(name): getattr(self, name) for name in ordered}


@dataclass
class Organization(Record):
    """An organization is the top-level tenant of the API."""

    kind = 'organization'

    id: str = ''
    name: str = ''
    api_enabled: bool = False
    licensing_model: str = ''
    region: str = ''
    region_host: str = ''
    dashboard_url: str = ''

    @classmethod
    def from_api(cls, data: dict):
        """Flatten the nested api, licensing, and cloud properties."""
        region = (data.get('cloud') or {}).get('region') or {}
        return cls(
            id=data.get('id', ''),
            name=data.get('name', ''),
            api_enabled=bool((data.get('api') or {}).get('enabled', False)),
            licensing_model=(data.get('licensing') or {}).get('model', ''),
            region=region.get('name', ''),
            region_host=(region.get('host') or {}).get('name', ''),
            dashboard_url=data.get('url', ''),
        )


@dataclass
class Network(Record):
    """A site grouping devices in one organization."""

    kind = 'network'

    id: str = ''
    name: str = ''
    organization_id: str = ''
    product_types: List[str] = field(default_factory=list)
    time_zone: str = ''
    tags: List[str] = field(default_factory=list)


SCOPE_FIELDS = ('organization_name', 'organization_id', 'network_name', 'network_id')


@dataclass
class Route(Record):
    """One entry of a network's routing table.

    fixed_ip_assignments is passed through as the API sent it.
    """

    kind = 'route'

    id: str = ''
    name: str = ''
    subnet: str = ''
    gateway_ip: str = ''
    gateway_vlan_id: Optional[int] = None
    enabled: bool = True
    fixed_ip_assignments: Any = None

    def with_scope(self, organization: Organization, network: Network):
        """Annotate with the organization and network it was found in."""
        return RouteWithNetwork(
            organization_name=organization.name,
            organization_id=organization.id,
            network_name=network.name,
            network_id=network.id,
            **{f.name: getattr(self, f.name) for f in fields(Route)})


@dataclass
class RouteWithNetwork(Route):
    leading_fields = SCOPE_FIELDS

    organization_name: str = ''
    organization_id: str = ''
    network_name: str = ''
    network_id: str = ''


@dataclass
class License(Record):
    """A license of an organization, network_id is empty for organization-wide licenses."""

    kind = 'license'

    id: str = ''
    organization_id: str = ''
    device_serial: str = ''
    network_id: str = ''
    state: str = ''
    edition: str = ''
    mode: str = ''
    expiration_date: str = ''
    license_type: str = ''
    license_key: str = ''
    order_number: str = ''
    duration_in_days: Optional[int] = None
    permanently_queued: bool = False

    def with_scope(self, organization: Organization, network: Network):
        """Annotate with the organization and the network it is attributed to.

        The license's own networkId, empty for organization-wide licenses, moves
        to license_network_id.
        """
        values = {f.name: getattr(self, f.name) for f in fields(License)}
        values['organization_id'] = organization.id
        values['network_id'] = network.id
        return LicenseWithNetwork(
            organization_name=organization.name,
            network_name=network.name,
            license_network_id=self.network_id or '',
            **values)


@dataclass
class LicenseWithNetwork(License):
    leading_fields = SCOPE_FIELDS

    organization_name: str = ''
    network_name: str = ''
    license_network_id: str = ''


@dataclass
class Device(Record):
    """A device in a network, status is free text as the API reports it."""

    kind = 'device'

    serial: str = ''
    name: str = ''
    model: str = ''
    network_id: str = ''
    mac: str = ''
    status: str = ''
    last_reported_at: str = ''
    product_type: str = ''
    tags: List[str] = field(default_factory=list)
    address: str = ''
    lat: Optional[float] = None
    lng: Optional[float] = None
    notes: str = ''

    def with_scope(self, organization: Organization, network: Network):
        """Annotate with the organization and network it was found in."""
        values = {f.name: getattr(self, f.name) for f in fields(Device)}
        values['network_id'] = network.id
        return DeviceWithNetwork(
            organization_name=organization.name,
            organization_id=organization.id,
            network_name=network.name,
            **values)


@dataclass
class DeviceWithNetwork(Device):
    leading_fields = SCOPE_FIELDS

    organization_name: str = ''
    organization_id: str = ''
    network_name: str = ''


@dataclass
class NetworkRoutes:
    """The routing table of one network, empty if it could not be fetched."""

    network: Network
    routes: List[Route] = field(default_factory=list)


@dataclass
class NetworkLicenses:
    """The licenses attributed to one network."""

    network: Network
    licenses: List[License] = field(default_factory=list)

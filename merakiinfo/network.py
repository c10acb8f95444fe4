"""Use a network's route sources and devices."""

import logging

from .exceptions import FatalStatusError, MerakiAPIError
from .models import Device, Route
from .transport import Transport

# a 400 or 404 means the network has no such feature, e.g. no switches
ABSENT_FEATURE_STATUSES = (400, 404)


class Network:
    """Describe one network by ID and fetch its routing table and devices.

    :param Transport transport: the session with the API
    :param str network_id: the ID of the network
    :param logging.Logger logger: optional logger, default is the transport's logger
    """

    def __init__(self, transport: Transport, network_id: str, logger: logging.Logger = None):
        """Initialize with a transport and the ID of a network."""
        self.transport = transport
        self.id = network_id
        self.logger = logger or transport.logger

    def get_routes(self):
        """Get the union of every route source of the network.

        The sources are fetched one after another in a fixed order and each
        one may fail without affecting the others.
        """
        routes = list()
        for source in [
            self.get_static_routes,
            self.get_vpn_routes,
            self.get_vlan_routes,
            self.get_switch_interface_routes,
            self.get_switch_static_routes,
            self.get_switch_stack_routes,
        ]:
            routes.extend(source())
        self.logger.info(f"found {len(routes)} routes in network {self.id}")
        return routes

    def get_tolerantly(self, path: str, description: str):
        """Get a sub-resource or None if it could not be fetched.

        :param path: path of the sub-resource
        :param description: what is fetched, for log messages
        """
        self.logger.debug(f"getting {description} for network {self.id}")
        try:
            return self.transport.get_json(path)
        except FatalStatusError as e:
            if e.status_code in ABSENT_FEATURE_STATUSES:
                self.logger.debug(f"no {description} for network {self.id}, got HTTP status {e.status_code}")
            else:
                self.logger.warning(f"failed to get {description} for network {self.id}, caught {e}")
        except MerakiAPIError as e:
            self.logger.warning(f"failed to get {description} for network {self.id}, caught {e}")
        return None

    def get_list_tolerantly(self, path: str, description: str):
        """Get a sub-resource that is a list, an unexpected shape counts as a failure."""
        data = self.get_tolerantly(path, description)
        if data is None:
            return list()
        if not isinstance(data, list):
            self.logger.warning(f"unexpected {type(data).__name__} instead of a list of {description} for network {self.id}")
            return list()
        return [d for d in data if isinstance(d, dict)]

    def get_static_routes(self):
        """Get the appliance's static routes."""
        routes = list()
        static_routes = self.get_list_tolerantly(f"/networks/{self.id}/appliance/staticRoutes", "appliance static routes")
        for i, r in enumerate(static_routes, start=1):
            route = Route.from_api(r)
            if not route.id:
                route.id = f"static-{i}"
            if not route.name:
                route.name = f"Static Route {i}"
            routes.append(route)
        return routes

    def get_vpn_routes(self):
        """Get the local subnets the appliance advertises to the site-to-site VPN."""
        vpn = self.get_tolerantly(f"/networks/{self.id}/appliance/vpn/siteToSiteVpn", "site-to-site VPN")
        if not isinstance(vpn, dict):
            return list()
        routes = list()
        for i, subnet in enumerate(vpn.get('subnets') or [], start=1):
            if isinstance(subnet, dict) and subnet.get('useVpn') and subnet.get('localSubnet'):
                routes.append(Route(
                    id=f"vpn-{i}",
                    name=f"VPN Subnet {i}",
                    subnet=subnet['localSubnet'],
                    enabled=True,
                ))
        return routes

    def get_vlan_routes(self):
        """Get the subnets of the appliance's VLANs, VLANs without a subnet are skipped."""
        routes = list()
        for vlan in self.get_list_tolerantly(f"/networks/{self.id}/appliance/vlans", "VLANs"):
            if not vlan.get('subnet'):
                continue
            vlan_id = vlan.get('id')
            routes.append(Route(
                id=f"vlan-{vlan_id}",
                name=vlan.get('name') or f"VLAN {vlan_id}",
                subnet=vlan['subnet'],
                gateway_ip=vlan.get('applianceIp') or '',
                gateway_vlan_id=vlan_id,
                enabled=True,
                fixed_ip_assignments=vlan.get('fixedIpAssignments'),
            ))
        return routes

    def get_switch_interface_routes(self):
        """Get the subnets of the switches' layer 3 interfaces."""
        interfaces = self.get_list_tolerantly(f"/networks/{self.id}/switch/routing/interfaces", "switch interfaces")
        return self.interface_routes(interfaces, id_prefix='switch-iface', name_prefix='Switch Interface')

    def get_switch_static_routes(self):
        """Get the switches' static routes."""
        static_routes = self.get_list_tolerantly(f"/networks/{self.id}/switch/routing/staticRoutes", "switch static routes")
        return self.switch_static_routes(static_routes, id_prefix='switch-static', name_prefix='Switch Static Route')

    def get_switch_stack_routes(self):
        """Get the interfaces, static routes, and DHCP relays of every switch stack."""
        routes = list()
        for stack in self.get_list_tolerantly(f"/networks/{self.id}/switch/stacks", "switch stacks"):
            stack_id = stack.get('id')
            if not stack_id:
                continue
            stack_path = f"/networks/{self.id}/switch/stacks/{stack_id}/routing"

            interfaces = self.get_list_tolerantly(f"{stack_path}/interfaces", f"interfaces of switch stack {stack_id}")
            routes.extend(self.interface_routes(
                interfaces,
                id_prefix=f"stack-{stack_id}-iface",
                name_prefix=f"Stack {stack.get('name') or stack_id} Interface"))

            static_routes = self.get_list_tolerantly(f"{stack_path}/staticRoutes", f"static routes of switch stack {stack_id}")
            routes.extend(self.switch_static_routes(
                static_routes,
                id_prefix=f"stack-{stack_id}-static",
                name_prefix=f"Stack {stack.get('name') or stack_id} Static Route"))

            dhcp = self.get_tolerantly(f"{stack_path}/dhcp", f"DHCP relays of switch stack {stack_id}")
            routes.extend(self.dhcp_relay_routes(dhcp, stack_id))
        return routes

    def interface_routes(self, interfaces: list, id_prefix: str, name_prefix: str):
        """Convert layer 3 interfaces to routes, interfaces without a subnet are skipped."""
        routes = list()
        for interface in interfaces:
            if not interface.get('subnet'):
                continue
            interface_id = interface.get('interfaceId')
            routes.append(Route(
                id=f"{id_prefix}-{interface_id}",
                name=interface.get('name') or f"{name_prefix} {interface_id}",
                subnet=interface['subnet'],
                gateway_ip=interface.get('interfaceIp') or '',
                gateway_vlan_id=interface.get('vlanId'),
                enabled=True,
            ))
        return routes

    def switch_static_routes(self, static_routes: list, id_prefix: str, name_prefix: str):
        """Convert switch static routes to routes."""
        routes = list()
        for i, r in enumerate(static_routes, start=1):
            routes.append(Route(
                id=f"{id_prefix}-{r.get('staticRouteId') or i}",
                name=r.get('name') or f"{name_prefix} {i}",
                subnet=r.get('subnet') or '',
                gateway_ip=r.get('nextHopIp') or '',
                enabled=True,
            ))
        return routes

    def dhcp_relay_routes(self, dhcp, stack_id: str):
        """Convert a stack's DHCP settings to routes via the first relay server.

        The endpoint may answer with one object or a list of per-interface
        objects. Entries without a subnet are skipped.
        """
        if isinstance(dhcp, dict):
            entries = [dhcp]
        elif isinstance(dhcp, list):
            entries = [d for d in dhcp if isinstance(d, dict)]
        else:
            return list()
        routes = list()
        for i, entry in enumerate(entries, start=1):
            if not entry.get('subnet'):
                continue
            relay_ips = entry.get('dhcpRelayServerIps') or []
            key = entry.get('interfaceId') or i
            routes.append(Route(
                id=f"stack-{stack_id}-dhcp-{key}",
                name=entry.get('name') or f"Stack {stack_id} DHCP Relay {key}",
                subnet=entry['subnet'],
                gateway_ip=relay_ips[0] if relay_ips else '',
                gateway_vlan_id=entry.get('vlanId'),
                enabled=True,
                fixed_ip_assignments=entry.get('fixedIpAssignments'),
            ))
        return routes

    def get_devices(self):
        """Get the devices of the network with the status they are listed with."""
        try:
            devices = self.transport.get_json(f"/networks/{self.id}/devices")
        except MerakiAPIError as e:
            raise MerakiAPIError(f"failed to get devices for network {self.id}, caught {e}") from e
        found = list()
        for d in devices or []:
            device = Device.from_api(d)
            if not device.network_id:
                device.network_id = self.id
            found.append(device)
        self.logger.debug(f"found {len(found)} devices in network {self.id}")
        return found

import logging

import pytest

from merakiinfo.network import Network
from merakiinfo.utility import RetryPolicy

NET = "/networks/N_1"

STATIC_ROUTES = [{
    'id': "d7fa4948-7921-4dfa-af6b-ae8b16c20c39",
    'name': "To Datacenter",
    'subnet': "10.0.0.0/8",
    'gatewayIp': "192.168.1.254",
    'enabled': True,
    'fixedIpAssignments': {"22:33:44:55:66:77": {'ip': "10.1.1.5", 'name': "Printer"}},
}]

VPN = {
    'mode': "spoke",
    'subnets': [
        {'localSubnet': "192.168.128.0/24", 'useVpn': True},
        {'localSubnet': "192.168.129.0/24", 'useVpn': False},
    ],
}

VLANS = [
    {'id': 10, 'name': "Data", 'subnet': "192.168.10.0/24", 'applianceIp': "192.168.10.1"},
    {'id': 20, 'name': "Unused"},
]


def test_route_union_in_source_order(transport, serve):
    serve({
        f"{NET}/appliance/staticRoutes": (200, STATIC_ROUTES),
        f"{NET}/appliance/vpn/siteToSiteVpn": (200, VPN),
        f"{NET}/appliance/vlans": (200, VLANS),
    })
    routes = Network(transport, "N_1").get_routes()
    assert [r.subnet for r in routes] == ["10.0.0.0/8", "192.168.128.0/24", "192.168.10.0/24"]
    assert [r.id for r in routes] == ["d7fa4948-7921-4dfa-af6b-ae8b16c20c39", "vpn-1", "vlan-10"]
    static, vpn, vlan = routes
    assert static.gateway_ip == "192.168.1.254"
    assert static.fixed_ip_assignments == STATIC_ROUTES[0]['fixedIpAssignments']
    assert vpn.name == "VPN Subnet 1"
    assert vlan.gateway_ip == "192.168.10.1"
    assert vlan.gateway_vlan_id == 10


def test_synthetic_names_and_ids(transport, serve):
    serve({
        f"{NET}/appliance/staticRoutes": (200, [{'subnet': "10.0.0.0/8", 'gatewayIp': "192.168.1.1"}]),
        f"{NET}/appliance/vlans": (200, [{'id': 30, 'subnet': "192.168.30.0/24", 'applianceIp': "192.168.30.1"}]),
    })
    static, vlan = Network(transport, "N_1").get_routes()
    assert static.id == "static-1"
    assert static.name == "Static Route 1"
    assert vlan.name == "VLAN 30"


def test_switch_routes(transport, serve):
    serve({
        f"{NET}/switch/routing/interfaces": (200, [
            {'interfaceId': "I1", 'name': "Servers", 'subnet': "10.10.0.0/24", 'interfaceIp': "10.10.0.1", 'vlanId': 100},
            {'interfaceId': "I2", 'name': "No subnet", 'interfaceIp': "10.11.0.1", 'vlanId': 101},
        ]),
        f"{NET}/switch/routing/staticRoutes": (200, [
            {'staticRouteId': "R1", 'subnet': "0.0.0.0/0", 'nextHopIp': "10.10.0.254"},
        ]),
    })
    interface, static = Network(transport, "N_1").get_routes()
    assert interface.id == "switch-iface-I1"
    assert interface.gateway_ip == "10.10.0.1"
    assert interface.gateway_vlan_id == 100
    assert static.id == "switch-static-R1"
    assert static.name == "Switch Static Route 1"
    assert static.gateway_ip == "10.10.0.254"


def test_switch_stack_routes(transport, serve):
    stack = f"{NET}/switch/stacks/S1/routing"
    serve({
        f"{NET}/switch/stacks": (200, [{'id': "S1", 'name': "Core"}]),
        f"{stack}/interfaces": (200, [{'interfaceId': "I1", 'subnet': "10.1.0.0/24", 'interfaceIp': "10.1.0.1", 'vlanId': 10}]),
        f"{stack}/staticRoutes": (200, [{'staticRouteId': "R1", 'subnet': "172.16.0.0/12", 'nextHopIp': "10.1.0.254"}]),
        f"{stack}/dhcp": (200, [
            {'interfaceId': "I1", 'subnet': "10.1.0.0/24", 'dhcpMode': "dhcpRelay", 'dhcpRelayServerIps': ["10.9.9.9", "10.9.9.10"]},
            {'interfaceId': "I2", 'dhcpMode': "dhcpDisabled"},
        ]),
    })
    routes = Network(transport, "N_1").get_routes()
    assert [r.id for r in routes] == ["stack-S1-iface-I1", "stack-S1-static-R1", "stack-S1-dhcp-I1"]
    assert routes[2].gateway_ip == "10.9.9.9"


def test_failed_stack_call_keeps_the_others(transport, serve):
    stack = f"{NET}/switch/stacks/S1/routing"
    serve({
        f"{NET}/switch/stacks": (200, [{'id': "S1"}]),
        f"{stack}/interfaces": (403, {'errors': ["Forbidden"]}),
        f"{stack}/staticRoutes": (200, [{'staticRouteId': "R1", 'subnet': "172.16.0.0/12", 'nextHopIp': "10.1.0.254"}]),
    })
    routes = Network(transport, "N_1").get_routes()
    assert [r.id for r in routes] == ["stack-S1-static-R1"]


def test_failed_source_is_tolerated(transport, serve, sleeps, caplog):
    transport.retry_policy = RetryPolicy(max_retries=1)
    serve({
        f"{NET}/appliance/staticRoutes": (500, {'errors': ["Internal error"]}),
        f"{NET}/appliance/vlans": (200, VLANS),
    })
    with caplog.at_level(logging.WARNING):
        routes = Network(transport, "N_1").get_routes()
    assert [r.id for r in routes] == ["vlan-10"]
    assert any("appliance static routes" in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)
    assert sleeps == [1.0]


def test_absent_features_are_not_warnings(transport, serve, caplog):
    serve({f"{NET}/appliance/vlans": (200, VLANS)})
    with caplog.at_level(logging.DEBUG):
        Network(transport, "N_1").get_routes()
    assert not [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_unexpected_shape_is_tolerated(transport, serve):
    serve({
        f"{NET}/appliance/staticRoutes": (200, {'errors': ["not a list"]}),
        f"{NET}/appliance/vlans": (200, VLANS),
    })
    assert [r.id for r in Network(transport, "N_1").get_routes()] == ["vlan-10"]


def test_vpn_subnets_that_are_not_objects_are_skipped(transport, serve):
    serve({f"{NET}/appliance/vpn/siteToSiteVpn": (200, {
        'mode': "spoke",
        'subnets': [None, "192.168.0.0/24", {'localSubnet': "192.168.128.0/24", 'useVpn': True}],
    })})
    routes = Network(transport, "N_1").get_vpn_routes()
    assert [(r.id, r.subnet) for r in routes] == [("vpn-3", "192.168.128.0/24")]


@pytest.mark.parametrize("body", [[], None])
def test_devices(transport, serve, body):
    serve({f"{NET}/devices": (200, body)})
    assert Network(transport, "N_1").get_devices() == []

from unittest.mock import MagicMock

import pytest

from merakiinfo.ctl import check_options, default_output_filename
from merakiinfo.exceptions import MerakiConfigError
from merakiinfo.models import Network, Organization


@pytest.mark.parametrize("command,apikey,org,network,all_networks,message", [
    ('route-tables', "", "O1", "", False, "API key is required"),
    ('route-tables', "k", "", "", False, "organization is required"),
    ('licenses', "k", "O1", "N_1", True, "cannot use --network with --all"),
    ('access', "k", "", "", True, "cannot use --all with access"),
    ('access', "k", "O1", "N_1", False, "cannot use --network with access"),
])
def test_invalid_options(command, apikey, org, network, all_networks, message):
    with pytest.raises(MerakiConfigError, match=message):
        check_options(command, apikey, org, network, all_networks)


@pytest.mark.parametrize("command,org,network,all_networks", [
    ('access', "", "", False),
    ('access', "O1", "", False),
    ('route-tables', "O1", "", False),
    ('route-tables', "O1", "N_1", False),
    ('down', "", "", True),
    ('alerting', "O1", "", True),
])
def test_valid_options(command, org, network, all_networks):
    assert check_options(command, "k", org, network, all_networks) is None


@pytest.fixture
def aggregator():
    aggregator = MagicMock()
    aggregator.orgs.find_organizations.return_value = [Organization(id="O1", name="Main Office")]
    aggregator.orgs.find_networks.return_value = [Network(id="N_1", name="Branch 1")]
    return aggregator


def test_default_filename_uses_names(aggregator):
    filename = default_output_filename(aggregator, 'route-tables', "O1", "N_1", 'csv')
    assert filename.startswith("RouteTables-Main_Office-Branch_1-")
    assert filename.endswith(".csv")


def test_default_filename_without_scope(aggregator):
    filename = default_output_filename(aggregator, 'down', "", "", 'json')
    assert filename.startswith("Down-AllOrganizations-AllNetworks-")
    aggregator.orgs.find_organizations.assert_not_called()


def test_default_filename_falls_back_to_ids(aggregator):
    filename = default_output_filename(aggregator, 'licenses', "O9", "N_9", 'yaml')
    assert filename.startswith("Licenses-O9-N_9-")

from unittest import mock

import pytest
import requests

from conftest import make_response
from merakiinfo.exceptions import FatalStatusError, MerakiConfigError, RetryableStatusError, TransportError
from merakiinfo.transport import Transport
from merakiinfo.utility import RetryPolicy


def test_empty_api_key_is_rejected():
    with pytest.raises(MerakiConfigError, match="API key cannot be empty"):
        Transport(api_key="")


def test_every_request_is_authenticated():
    t = Transport(api_key="secret")
    assert t.http.headers['X-Cisco-Meraki-API-Key'] == "secret"
    assert t.http.headers['Content-Type'] == "application/json"
    assert t.http.headers['User-Agent'].startswith("meraki-info/")


def test_proxy_disables_verification_unless_socks():
    http_proxy = Transport(api_key="k", proxy="http://localhost:8080")
    assert http_proxy.proxies == {'http': "http://localhost:8080", 'https': "http://localhost:8080"}
    assert http_proxy.verify is False
    socks_proxy = Transport(api_key="k", proxy="socks5://localhost:1080")
    assert socks_proxy.verify is True
    no_proxy = Transport(api_key="k")
    assert no_proxy.proxies == {}
    assert no_proxy.verify is True


def test_url_keeps_absolute_links():
    t = Transport(api_key="k")
    assert t.url("/organizations") == "https://api.meraki.com/api/v1/organizations"
    link = "https://n123.meraki.com/api/v1/organizations?startingAfter=5"
    assert t.url(link) == link


def test_success_is_returned_without_retry(transport, sleeps):
    transport.http.request.return_value = make_response(200, [{'id': "1"}])
    assert transport.get_json("/organizations") == [{'id': "1"}]
    assert transport.http.request.call_count == 1
    assert sleeps == []


def test_retries_exhausted_after_four_attempts(transport, sleeps):
    transport.http.request.side_effect = lambda *args, **kwargs: make_response(500)
    with pytest.raises(RetryableStatusError) as excinfo:
        transport.request("GET", "/organizations")
    assert transport.http.request.call_count == 4
    assert excinfo.value.attempts == 4
    assert excinfo.value.status_code == 500
    assert "4 attempts" in str(excinfo.value)
    assert sleeps == [1.0, 2.0, 4.0]


def test_recovers_after_rate_limiting(transport, sleeps):
    transport.http.request.side_effect = [
        make_response(429),
        make_response(429),
        make_response(200, [{'id': "1"}]),
    ]
    response = transport.request("GET", "/organizations")
    assert response.status_code == 200
    assert transport.http.request.call_count == 3
    assert sleeps == [1.0, 2.0]


def test_not_found_is_not_retried(transport, sleeps):
    transport.http.request.return_value = make_response(404, {'errors': ["Not found"]})
    with pytest.raises(FatalStatusError) as excinfo:
        transport.request("GET", "/networks/N_1/appliance/vlans")
    assert transport.http.request.call_count == 1
    assert excinfo.value.status_code == 404
    assert excinfo.value.path == "/networks/N_1/appliance/vlans"
    assert sleeps == []


def test_failed_responses_are_closed(transport, sleeps):
    responses = [make_response(503), make_response(404, {'errors': ["Not found"]})]
    for response in responses:
        response.close = mock.MagicMock()
    transport.http.request.side_effect = responses
    with pytest.raises(FatalStatusError):
        transport.request("GET", "/networks/N_1/appliance/vlans")
    assert [r.close.call_count for r in responses] == [1, 1]


def test_transport_errors_are_retried(transport, sleeps):
    transport.http.request.side_effect = requests.exceptions.ConnectionError("connection refused")
    with pytest.raises(TransportError) as excinfo:
        transport.request("GET", "/organizations")
    assert transport.http.request.call_count == 4
    assert excinfo.value.attempts == 4
    assert isinstance(excinfo.value.__cause__, requests.exceptions.ConnectionError)
    assert len(sleeps) == 3


def test_replacing_retry_policy(transport, sleeps):
    transport.retry_policy = RetryPolicy(max_retries=0)
    transport.http.request.return_value = make_response(503)
    with pytest.raises(RetryableStatusError, match="1 attempts"):
        transport.request("GET", "/organizations")
    assert transport.http.request.call_count == 1
    assert sleeps == []


def test_retry_policy_must_be_a_policy(transport):
    with pytest.raises(MerakiConfigError):
        transport.retry_policy = {'max_retries': 1}


def test_collection_follows_next_links(transport):
    next_url = "https://api.meraki.com/api/v1/organizations/1/networks?perPage=2&startingAfter=N_2"
    transport.http.request.side_effect = [
        make_response(200, [{'id': "N_1"}, {'id': "N_2"}], headers={'Link': f"<{next_url}>; rel=next"}),
        make_response(200, [{'id': "N_3"}]),
    ]
    networks = transport.get_collection("/organizations/1/networks", params={'perPage': 2})
    assert [n['id'] for n in networks] == ["N_1", "N_2", "N_3"]
    first, second = transport.http.request.call_args_list
    assert first.kwargs['params'] == {'perPage': 2}
    assert second.args[1] == next_url
    assert second.kwargs['params'] is None

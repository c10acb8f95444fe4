"""Send authenticated requests to the Dashboard API and retry transient failures."""

import logging
import time  # sleep between attempts

from requests import Session
from requests.exceptions import JSONDecodeError, RequestException
from urllib3 import disable_warnings
from urllib3.exceptions import InsecureRequestWarning

from .exceptions import FatalStatusError, MerakiAPIError, MerakiConfigError, RetryableStatusError, TransportError
from .utility import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, RetryPolicy, TimeoutHTTPAdapter, calculate_backoff, is_retryable_error
from .version import __version__


class Transport:
    """Own the HTTP session, the API key, and the retry policy for one process.

    :param str api_key: the Dashboard API key sent with every request
    :param str base_url: API root, all paths are relative to this
    :param RetryPolicy retry_policy: backoff configuration, default is 3 retries from 1s doubling to at most 30s
    :param int timeout: seconds to wait for each attempt
    :param str proxy: optional HTTP proxy, e.g., http://localhost:8080
    :param logging.Logger logger: optional logger, default is a null logger
    """

    def __init__(self,
                 api_key: str,
                 base_url: str = DEFAULT_BASE_URL,
                 retry_policy: RetryPolicy = None,
                 timeout: int = DEFAULT_TIMEOUT,
                 proxy: str = None,
                 logger: logging.Logger = None):
        """Initialize an instance of transport."""
        if logger:
            self.logger = logger
        else:
            self.logger = logging.getLogger(__name__)
            self.logger.addHandler(logging.NullHandler())

        if not api_key:
            raise MerakiConfigError("API key cannot be empty")

        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._retry_policy = retry_policy or RetryPolicy()

        # verify the server certificate if proxy is type SOCKS or None
        self.proxy = proxy
        if proxy is None:
            self.proxies = dict()
            self.verify = True
        else:
            self.proxies = {
                'http': proxy,
                'https': proxy
            }
            if proxy[0:5] == 'socks':
                self.verify = True
            else:
                self.verify = False
                # the proxy terminates TLS so its certificate is not the server's
                disable_warnings(InsecureRequestWarning)

        self.http = Session()
        adapter = TimeoutHTTPAdapter(timeout=timeout)
        self.http.mount("https://", adapter)
        self.http.mount("http://", adapter)
        self.http.headers.update({
            'X-Cisco-Meraki-API-Key': api_key,
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'User-Agent': f"meraki-info/{__version__}",
        })

    @property
    def retry_policy(self):
        """The retry policy in use."""
        return self._retry_policy

    @retry_policy.setter
    def retry_policy(self, policy: RetryPolicy):
        """Replace the whole retry policy."""
        if not isinstance(policy, RetryPolicy):
            raise MerakiConfigError(f"expected a RetryPolicy, got {type(policy).__name__}")
        self._retry_policy = policy

    def url(self, path: str):
        """Compose the full URL for a path unless it is already absolute, e.g. a pagination link."""
        if path.startswith('http://') or path.startswith('https://'):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, params: dict = None):
        """Send a request and return the response if the status is 2xx.

        Transport errors and statuses 429, 500, 502, 503, 504 are retried with
        exponential backoff. Any other status is raised immediately. The caller
        must close the returned response.

        :param method: HTTP verb e.g. GET
        :param path: path relative to base_url e.g. /organizations
        :param params: optional query params
        """
        url = self.url(path)
        policy = self._retry_policy
        attempts = policy.max_retries + 1
        last_error, last_status = None, None

        for attempt in range(attempts):
            self.logger.debug(f"making API request {method} {url} (attempt {attempt + 1} of {attempts})")
            try:
                response = self.http.request(
                    method,
                    url,
                    params=params,
                    proxies=self.proxies,
                    verify=self.verify,
                )
            except RequestException as e:
                last_error, last_status = e, None
                reason = f"transport error: {e}"
            else:
                if 200 <= response.status_code < 300:
                    return response
                last_error, last_status = None, response.status_code
                reason = f"HTTP status {response.status_code}"
                # release the connection whether or not we retry
                response.close()
                if not is_retryable_error(None, last_status):
                    raise FatalStatusError(
                        f"API request {method} {path} failed with HTTP status {last_status}",
                        status_code=last_status,
                        method=method,
                        path=path)

            if attempt + 1 < attempts:
                backoff = calculate_backoff(policy, attempt)
                self.logger.info(f"retrying API request {method} {path} in {backoff:g}s after {reason}")
                time.sleep(backoff)

        if last_error is not None:
            raise TransportError(f"API request {method} {path} failed after {attempts} attempts: {last_error}", attempts=attempts) from last_error
        raise RetryableStatusError(
            f"API request {method} {path} failed after {attempts} attempts with HTTP status {last_status}",
            status_code=last_status,
            attempts=attempts,
            method=method,
            path=path)

    def decode(self, response, path: str):
        """Deserialize and close a response."""
        try:
            return response.json()
        except (JSONDecodeError, ValueError) as e:
            raise MerakiAPIError(f"failed to decode the response to {path} as JSON, caught {e}") from e
        finally:
            response.close()

    def get_json(self, path: str, params: dict = None):
        """Get and deserialize one resource or collection.

        :param path: path relative to base_url
        :param params: optional query params
        """
        response = self.request("GET", path, params=params)
        return self.decode(response, path)

    def find_pages(self, path: str, params: dict = None):
        """
        Generate each page of a collection.

        The API links the next page in the Link header and that URL already
        carries the query, so params only apply to the first page.

        :param path: path relative to base_url
        :param params: optional query params e.g. perPage
        """
        url = path
        page_params = params
        while url:
            response = self.request("GET", url, params=page_params)
            page = self.decode(response, url)
            yield page
            url = response.links.get('next', {}).get('url')
            page_params = None
            if url:
                self.logger.debug(f"following next page link {url}")

    def get_collection(self, path: str, params: dict = None):
        """Get all pages of a collection as one list."""
        collection = list()
        for page in self.find_pages(path, params=params):
            if isinstance(page, list):
                collection.extend(page)
            else:
                collection.append(page)
        return collection

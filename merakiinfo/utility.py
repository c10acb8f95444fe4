"""Shared helper functions, constants, and classes."""

import re  # regex
import unicodedata  # case insensitive compare in resolve_identifier
from dataclasses import dataclass
from datetime import datetime

import inflect  # singular and plural nouns
from requests.adapters import HTTPAdapter

from .exceptions import AmbiguousNameError, NotFoundError

DEFAULT_BASE_URL = "https://api.meraki.com/api/v1"
DEFAULT_TIMEOUT = 30  # seconds per attempt
DEFAULT_PAGE_SIZE = 1000
RETRYABLE_STATUS_CODES = frozenset([429, 500, 502, 503, 504])

COMMANDS = ['access', 'route-tables', 'licenses', 'down', 'alerting']
FORMATS = ['text', 'json', 'xml', 'csv', 'yaml']
FILENAME_PREFIXES = {
    'access': 'Access',
    'route-tables': 'RouteTables',
    'licenses': 'Licenses',
    'down': 'Down',
    'alerting': 'Alerting',
}
FILE_EXTENSIONS = {
    'json': '.json',
    'xml': '.xml',
    'csv': '.csv',
    'yaml': '.yaml',
}

# every device status literal this client recognizes, down and alerting are
# subsets of this one set
DEVICE_STATUSES = frozenset(['online', 'offline', 'alerting', 'dormant', 'down', 'unreachable', 'disconnected'])
DOWN_STATUSES = frozenset(s for s in DEVICE_STATUSES if s not in ('online',))
ALERTING_STATUSES = frozenset(s for s in DEVICE_STATUSES if s in ('alerting',))


def plural(singular):
    """Pluralize a singular form."""
    # if already plural then return, else pluralize
    p = inflect.engine()
    if singular[-1:] == 's':
        return(singular)
    else:
        return(p.plural_noun(singular))


def count_noun(count: int, noun: str):
    """Compose '1 network' or '3 networks'."""
    p = inflect.engine()
    return f"{count} {p.plural_noun(noun, count)}"


def snake2camel(snake_str):
    """Convert a string from snake case to camel case."""
    first, *others = snake_str.split('_')
    return ''.join([first.lower(), *map(str.title, others)])


def normalize_caseless(text):
    """Normalize a string as lowercase unicode KD form.

    The normal form KD (NFKD) will apply the compatibility decomposition,
    i.e. replace all compatibility characters with their equivalents.
    """
    return unicodedata.normalize("NFKD", text.casefold())


def caseless_equal(left, right):
    """Compare the KD normal form of left, right strings."""
    return normalize_caseless(left) == normalize_caseless(right)


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff without jitter.

    Intervals are seconds. The policy is immutable, replace it as a whole to
    change any part of it.
    """

    max_retries: int = 3
    initial_interval: float = 1.0
    multiplier: float = 2.0
    max_interval: float = 30.0

    def __post_init__(self):
        """Reject values that would never wait or never stop."""
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be zero or more, got {self.max_retries}")
        if self.initial_interval <= 0 or self.max_interval <= 0:
            raise ValueError(f"intervals must be positive, got initial={self.initial_interval} max={self.max_interval}")
        if self.multiplier < 1:
            raise ValueError(f"multiplier must be at least 1, got {self.multiplier}")


def calculate_backoff(policy: RetryPolicy, attempt: int):
    """Return the seconds to wait before retry number attempt (0-based)."""
    backoff = policy.initial_interval * (policy.multiplier ** attempt)
    return min(backoff, policy.max_interval)


def is_retryable_error(err, status_code: int = None):
    """True if an attempt that ended with err or status_code is worth repeating.

    Any transport error is retryable. Of the statuses, only rate limiting and
    the transient server errors are.
    """
    if err is not None:
        return True
    return status_code in RETRYABLE_STATUS_CODES


class TimeoutHTTPAdapter(HTTPAdapter):
    """Configure Python requests library to have a timeout default and no retries of its own."""

    def __init__(self, *args, **kwargs):
        self.timeout = DEFAULT_TIMEOUT
        if "timeout" in kwargs:
            self.timeout = kwargs["timeout"]
            del kwargs["timeout"]
        kwargs.setdefault("max_retries", 0)
        super().__init__(*args, **kwargs)

    def send(self, request, **kwargs):
        timeout = kwargs.get("timeout")
        if timeout is None:
            kwargs["timeout"] = self.timeout
        return super().send(request, **kwargs)


def normalize_status(status):
    """Lowercase and strip a free-text device status, None becomes empty."""
    return (status or '').strip().lower()


def is_down(status):
    """True if the device status means the device is down."""
    return normalize_status(status) in DOWN_STATUSES


def is_alerting(status):
    """True if the device status means the device is alerting."""
    return normalize_status(status) in ALERTING_STATUSES


def license_belongs_to_network(license, network_id: str):
    """True if the license is for this network or for the whole organization."""
    return not license.network_id or license.network_id == network_id


def resolve_identifier(identifier: str, candidates: list, kind: str, scope: str = None, logger=None):
    """Resolve an ID or case-insensitive name to the ID of exactly one candidate.

    The ID is tried first so that a name which happens to equal another
    candidate's ID still resolves by that ID.

    :param identifier: an ID or name as typed by the user, empty means no restriction
    :param candidates: a list of objects with attributes id and name
    :param kind: singular noun for messages e.g. "network"
    :param scope: optional ID of the containing organization for messages
    """
    if not identifier:
        return ""
    for candidate in candidates:
        if candidate.id == identifier:
            return identifier

    matches = [c for c in candidates if caseless_equal(c.name or '', identifier)]
    if not matches:
        raise NotFoundError(
            kind=kind,
            identifier=identifier,
            candidates=[{'name': c.name, 'id': c.id} for c in candidates],
            scope=scope)
    elif len(matches) > 1:
        raise AmbiguousNameError(kind=kind, identifier=identifier, ids=[m.id for m in matches], scope=scope)
    if logger:
        logger.info(f"resolved {kind} name '{identifier}' to ID {matches[0].id}")
    return matches[0].id


def sanitize_filename(text: str):
    """Replace characters that are unsafe in file names."""
    sanitized = re.sub(r'[^a-zA-Z0-9\-_.]', '_', text or '')
    sanitized = re.sub(r'_{2,}', '_', sanitized)
    sanitized = sanitized.strip('_')
    return sanitized or 'unknown'


def file_extension(fmt: str):
    """Map an output format to a file extension, .txt for text and unknowns."""
    return FILE_EXTENSIONS.get((fmt or '').lower(), '.txt')


def default_filename(prefix: str, organization_name: str, network_name: str, fmt: str, now: datetime = None):
    """Compose <prefix>-<org>-<network>-<timestamp>.<ext>.

    :param network_name: empty means every network i.e. AllNetworks
    :param now: aware or naive datetime, default is local now
    """
    if now is None:
        now = datetime.now().astimezone()
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S")
    offset = now.strftime("%z")
    if offset:
        timestamp += f"{offset[:3]}-{offset[3:]}"
    return f"{prefix}-{sanitize_filename(organization_name)}-{sanitize_filename(network_name or 'AllNetworks')}-{timestamp}{file_extension(fmt)}"

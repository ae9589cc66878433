"""URL canonicalization for identity comparison.

Two URLs are exact matches iff their normalized forms are equal. Each
canonicalization step can be toggled through ``DeduplicationOptions``;
normalization never raises and falls back to the lower-cased input when a URL
cannot be parsed.
"""

import re
from urllib.parse import SplitResult, parse_qsl, urlencode, urlsplit

from w3lib.url import url_query_cleaner

from ..models.config import DeduplicationOptions

# Query parameters that never affect content identity
TRACKING_PARAMS = [
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
    "fbclid",
    "gclid",
    "msclkid",
    "ref",
    "source",
    "session",
    "_ga",
]

_HOSTNAME_RE = re.compile(r"[\w.-]+")


def _split_url(url: str) -> SplitResult:
    """Split a URL, treating scheme-less input as scheme-relative.

    Raises:
        ValueError: If the URL has no usable hostname or an invalid port
    """
    url = url.strip()
    if "://" not in url and not url.startswith("//"):
        url = "//" + url

    parts = urlsplit(url)
    hostname = parts.hostname
    if not hostname or not _HOSTNAME_RE.fullmatch(hostname):
        raise ValueError(f"No valid hostname in URL: {url!r}")

    # Accessing the port validates it
    _ = parts.port
    return parts


def extract_hostname(url: str) -> str | None:
    """Return the lower-cased hostname of ``url``, or None if unparseable."""
    try:
        return _split_url(url).hostname
    except ValueError:
        return None


def registrable_domain(hostname: str) -> str:
    """Approximate the registrable domain as the last two hostname labels.

    No public-suffix list is consulted, so hosts under multi-label suffixes
    such as ``co.uk`` collapse too far.
    """
    labels = hostname.split(".")
    if len(labels) > 2:
        return ".".join(labels[-2:])
    return hostname


def _strip_www(hostname: str) -> str:
    return hostname[4:] if hostname.startswith("www.") else hostname


def hostnames_match(
    hostname_a: str | None,
    hostname_b: str | None,
    treat_subdomains_as_same: bool = False,
) -> bool:
    """Check whether two hostnames are considered the same site."""
    if not hostname_a or not hostname_b:
        return False

    if hostname_a == hostname_b:
        return True

    if _strip_www(hostname_a) == _strip_www(hostname_b):
        return True

    if treat_subdomains_as_same:
        return registrable_domain(hostname_a) == registrable_domain(hostname_b)

    return False


class UrlNormalizer:
    """Canonicalizes URLs according to a deduplication option set."""

    def __init__(self, options: DeduplicationOptions | None = None):
        self.options = options or DeduplicationOptions()

    def normalize(self, url: str) -> str:
        """Normalize a URL for comparison."""
        options = self.options
        keep_query = not options.ignore_query_params

        try:
            if keep_query and options.strip_tracking_params and "?" in url:
                url = url_query_cleaner(
                    url, TRACKING_PARAMS, remove=True, unique=False, keep_fragments=True
                )
            parts = _split_url(url)
        except ValueError:
            return url.lower()

        # Protocol
        normalized = "" if options.ignore_protocol else f"{parts.scheme or ''}://"

        # Hostname
        hostname = parts.hostname or ""
        if options.ignore_www:
            hostname = _strip_www(hostname)
        if options.treat_subdomains_as_same:
            hostname = registrable_domain(hostname)
        normalized += hostname
        if parts.port is not None:
            normalized += f":{parts.port}"

        # Path
        path = parts.path
        if path == "/":
            path = ""
        elif options.ignore_trailing_slash:
            path = path.rstrip("/")
        if options.ignore_case_in_path:
            path = path.lower()
        normalized += path

        # Query parameters, sorted by key so ordering never matters
        if keep_query and parts.query:
            params = parse_qsl(parts.query, keep_blank_values=True)
            params.sort(key=lambda param: param[0])
            if params:
                normalized += "?" + urlencode(params)

        return normalized

    __call__ = normalize


def normalize_url(url: str, options: DeduplicationOptions | None = None) -> str:
    """Normalize ``url`` with the given (or default) options."""
    return UrlNormalizer(options).normalize(url)

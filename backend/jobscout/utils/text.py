import re
from urllib.parse import urlsplit

_WHITESPACE = re.compile(r"\s+")
_ARABIC = re.compile("[\u0600-\u06ff]")


def collapse_whitespace(value: str | None) -> str | None:
    if not value:
        return None
    collapsed = _WHITESPACE.sub(" ", value).strip()
    return collapsed or None


def has_arabic(value: str) -> bool:
    return bool(_ARABIC.search(value))


def host_of(url: str) -> str | None:
    """Lower-cased hostname without a leading ``www.``, or None for unparseable URLs."""
    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    return hostname.lower().removeprefix("www.")


def url_key(url: str) -> str:
    """Dedup key for a posting: the URL with its query string removed."""
    return url.split("?", 1)[0]

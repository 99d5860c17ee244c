# Response Renderer
"""
Multi-format rendering of resolved client addresses.

Every renderer takes (ipv4, ipv6, single_field):
- single_field=True emits one unlabeled value, IPv4 preferred over IPv6
- single_field=False emits labeled ipv4/ipv6 fields for whichever are present

Values are interpolated as-is into Text, YAML, TOML, XML and the JSONP
callback name. They are expected to be validated IP literals or operator
controlled callback names; nothing is escaped so output stays byte-stable.
"""

import json
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Tuple


DEFAULT_CALLBACK = "callback"


class FormatSpec(Enum):
    """Output formats; the value is the path segment that selects it."""

    TEXT = "text"
    JSON = "json"
    JSONP = "jsonp"
    YAML = "yaml"
    TOML = "toml"
    XML = "xml"

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES[self]

    @classmethod
    def from_segment(cls, segment: str) -> Optional["FormatSpec"]:
        """Look up a format selectable by path prefix (text is the default, not a prefix)."""
        for fmt in ROUTABLE_FORMATS:
            if fmt.value == segment:
                return fmt
        return None


CONTENT_TYPES: Dict[FormatSpec, str] = {
    FormatSpec.TEXT: "text/plain",
    FormatSpec.JSON: "application/json",
    FormatSpec.JSONP: "application/javascript",
    FormatSpec.YAML: "application/yaml",
    FormatSpec.TOML: "application/toml",
    FormatSpec.XML: "application/xml",
}

ROUTABLE_FORMATS = (
    FormatSpec.JSON,
    FormatSpec.JSONP,
    FormatSpec.XML,
    FormatSpec.YAML,
    FormatSpec.TOML,
)


def _first_present(ipv4: Optional[str], ipv6: Optional[str]) -> str:
    if ipv4 is not None:
        return ipv4
    if ipv6 is not None:
        return ipv6
    return ""


def _present_fields(ipv4: Optional[str], ipv6: Optional[str]) -> Tuple[Tuple[str, str], ...]:
    fields = (("ipv4", ipv4), ("ipv6", ipv6))
    return tuple((name, value) for name, value in fields if value is not None)


def render_text(ipv4: Optional[str], ipv6: Optional[str], single_field: bool) -> str:
    if single_field:
        return _first_present(ipv4, ipv6)
    return "\n".join(value for _, value in _present_fields(ipv4, ipv6))


def render_json(ipv4: Optional[str], ipv6: Optional[str], single_field: bool) -> str:
    """
    Compact JSON object.

    Absent fields are omitted rather than emitted as null.
    """
    if single_field:
        payload = {"ip": _first_present(ipv4, ipv6)}
    else:
        payload = dict(_present_fields(ipv4, ipv6))
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def render_jsonp(
    ipv4: Optional[str],
    ipv6: Optional[str],
    single_field: bool,
    callback: str = DEFAULT_CALLBACK,
) -> str:
    return f"{callback}({render_json(ipv4, ipv6, single_field)});"


def render_yaml(ipv4: Optional[str], ipv6: Optional[str], single_field: bool) -> str:
    if single_field:
        return f"ip: {_first_present(ipv4, ipv6)}"
    lines = [f"{name}: {value}" for name, value in _present_fields(ipv4, ipv6)]
    return "\n".join(lines).strip()


def render_toml(ipv4: Optional[str], ipv6: Optional[str], single_field: bool) -> str:
    if single_field:
        return f"ip = '{_first_present(ipv4, ipv6)}'"
    lines = [f"{name} = '{value}'" for name, value in _present_fields(ipv4, ipv6)]
    return "\n".join(lines).strip()


def render_xml(ipv4: Optional[str], ipv6: Optional[str], single_field: bool) -> str:
    if single_field:
        return f"<ip>{_first_present(ipv4, ipv6)}</ip>"
    inner = "".join(f"<{name}>{value}</{name}>" for name, value in _present_fields(ipv4, ipv6))
    return f"<ip>{inner}</ip>"


RENDERERS: Dict[FormatSpec, Callable[[Optional[str], Optional[str], bool], str]] = {
    FormatSpec.TEXT: render_text,
    FormatSpec.JSON: render_json,
    FormatSpec.YAML: render_yaml,
    FormatSpec.TOML: render_toml,
    FormatSpec.XML: render_xml,
}


def render(
    ipv4: Optional[str],
    ipv6: Optional[str],
    fmt: FormatSpec,
    single_field: bool,
    query: Optional[Mapping[str, str]] = None,
) -> Tuple[str, str]:
    """
    Render addresses in the requested format.

    Args:
        ipv4: IPv4 address, if present
        ipv6: IPv6 address, if present
        fmt: Output format
        single_field: Emit one unlabeled value instead of labeled fields
        query: Query parameters; only "callback" is read, for JSONP

    Returns:
        Tuple of (body, content_type)
    """
    if fmt is FormatSpec.JSONP:
        callback = (query or {}).get("callback", DEFAULT_CALLBACK)
        body = render_jsonp(ipv4, ipv6, single_field, callback=callback)
    else:
        body = RENDERERS[fmt](ipv4, ipv6, single_field)
    return body, fmt.content_type

"""Route id parsing and pattern compilation.

A route id is the ``/``-delimited logical path of a route file::

    ""                      -> ^/$
    "about"                 -> ^/about/?$
    "blog/[slug]"           -> ^/blog/([^/]+?)/?$
    "blog/[slug].json"      -> ^/blog/([^/]+?)\\.json$      (endpoint)
    "docs/[...path]"        -> ^/docs(?:/(.*))?/?$
    "items/[id=integer]"    -> ^/items/([^/]+?)/?$        (matcher "integer")

Page ids may end in ``@layout`` to select a named layout; that suffix
never reaches the pattern.
"""

import re
import unicodedata
from urllib.parse import quote

from perch.errors import RouteDefinitionError
from perch.routing.route import RouteParam, RoutePart, Segment

# [name], [...name], [name=matcher], [...name=matcher]
_PARAM_RE = re.compile(r"\[(\.\.\.)?(\w+)(?:=(\w+))?\]")

# Characters ``quote`` leaves alone on top of its alphanumerics and ``_.-~``.
# ``%`` stays so names that are already percent-encoded survive verbatim.
_SAFE_CHARS = ";,/:@&=+$!*'()%"


def split_layout_ref(route_id: str) -> tuple[str, str | None]:
    """Split ``"a/b@name"`` into ``("a/b", "name")``.

    Only the last segment can carry a layout reference.
    """
    head, sep, last = route_id.rpartition("/")
    name_part, at, layout = last.partition("@")
    if not at:
        return route_id, None
    return f"{head}{sep}{name_part}", layout


def parse_segment(segment: str, *, source: str | None = None) -> Segment:
    """Parse one segment into alternating static/dynamic parts.

    Raises:
        RouteDefinitionError: Two parameters touch with no literal text
            between them (``[foo][bar]``).
    """
    parts: list[RoutePart] = []
    pos = 0
    prev_end: int | None = None

    for match in _PARAM_RE.finditer(segment):
        if prev_end is not None and match.start() == prev_end:
            msg = f"Invalid route {source or segment} — parameters must be separated"
            raise RouteDefinitionError(msg)

        parts.append(RoutePart("static", segment[pos : match.start()]))
        rest, name, matcher = match.groups()
        parts.append(
            RoutePart(
                "rest" if rest else "param",
                match.group(0),
                name=name,
                matcher=matcher,
            )
        )
        pos = prev_end = match.end()

    parts.append(RoutePart("static", segment[pos:]))
    return tuple(parts)


def parse_route_id(route_id: str, *, source: str | None = None) -> tuple[Segment, ...]:
    """Parse a route id (without ``@layout`` suffix) into segments.

    Args:
        route_id: The id, e.g. ``"blog/[slug].json"``.
        source: File the id came from, named in error messages.
    """
    if not route_id:
        return ()
    return tuple(parse_segment(seg, source=source) for seg in route_id.split("/"))


def route_params(segments: tuple[Segment, ...]) -> tuple[RouteParam, ...]:
    """Collect the dynamic parts of *segments* in capture-group order."""
    return tuple(
        RouteParam(name=part.name or "", matcher=part.matcher, rest=part.kind == "rest")
        for segment in segments
        for part in segment
        if part.dynamic
    )


def encode_literal(text: str) -> str:
    """Return *text* as it appears in a percent-encoded URL pathname."""
    return quote(unicodedata.normalize("NFC", text), safe=_SAFE_CHARS)


def _is_bare_rest(segment: Segment) -> bool:
    return (
        len(segment) == 3
        and segment[1].kind == "rest"
        and not segment[0].content
        and not segment[2].content
    )


def _compile_segment(segment: Segment) -> str:
    # A whole-segment rest may also match nothing, slash included
    if _is_bare_rest(segment):
        return "(?:/(.*))?"

    pieces = ["/"]
    for part in segment:
        if part.kind == "static":
            pieces.append(re.escape(encode_literal(part.content)))
        elif part.kind == "rest":
            pieces.append("(.*?)")
        else:
            pieces.append("([^/]+?)")
    return "".join(pieces)


def has_literal_suffix(segments: tuple[Segment, ...]) -> bool:
    """True if the last segment's literal text carries an extension (``.json``)."""
    if not segments:
        return False
    return any("." in part.content for part in segments[-1] if part.kind == "static")


def compile_pattern(segments: tuple[Segment, ...], *, trailing_slash: bool = True) -> re.Pattern[str]:
    """Compile parsed segments into an anchored regular expression.

    Args:
        segments: Output of :func:`parse_route_id`.
        trailing_slash: Accept an optional trailing ``/``.
    """
    if not segments:
        return re.compile(r"^/$")

    source = "".join(_compile_segment(segment) for segment in segments)
    suffix = "/?" if trailing_slash else ""
    return re.compile(f"^{source}{suffix}$")


def compile_route(
    route_id: str,
    *,
    endpoint: bool = False,
    source: str | None = None,
) -> tuple[re.Pattern[str], tuple[RouteParam, ...]]:
    """Compile a route id into its pattern and parameter list.

    Pages always tolerate a trailing slash.  Endpoints do unless their
    last segment ends in a literal extension, e.g. ``blog.json``.
    """
    path_id = route_id if endpoint else split_layout_ref(route_id)[0]
    segments = parse_route_id(path_id, source=source)
    trailing = not (endpoint and has_literal_suffix(segments))
    return compile_pattern(segments, trailing_slash=trailing), route_params(segments)

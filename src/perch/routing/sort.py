"""Match-order sorting for compiled routes.

The runtime tests routes in manifest order and takes the first match, so
more specific routes have to come first.  The order is built from small
comparators, each handling one rule, applied in layers:

1. shape, segment by segment across the whole id
   ``compare_depth``     where one id runs out of segments
   ``compare_segments``  part by part inside one segment
   (``compare_literal`` for literal text, ``compare_dynamic`` for params)
2. ``compare_kind``      endpoints before pages
3. ``compare_text``      literal text, lexicographically
4. stable sort           discovery order for everything still tied

Literal text only breaks ties between routes of the same shape, so
``[...rest]/deep/[...tail]`` still comes before ``[...rest]/abc``.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from functools import cmp_to_key

from perch.routing.pattern import parse_route_id, split_layout_ref
from perch.routing.route import RouteEntry, RoutePart, Segment


@dataclass(frozen=True, slots=True)
class _SortItem:
    route: RouteEntry
    segments: tuple[Segment, ...]
    has_rest: bool
    # Literal parts of each segment, for the final text comparison
    text: tuple[tuple[str, ...], ...]


def compare_literal(a: str, b: str) -> int:
    """Literal text ranks before none; what the text says is not compared here.

    An empty literal (a segment that opens or closes with a parameter)
    ranks last.
    """
    if bool(a) == bool(b):
        return 0
    return -1 if a else 1


def _dynamic_rank(part: RoutePart) -> int:
    if part.kind == "rest":
        return 2
    # A matcher narrows what a parameter accepts
    return 0 if part.matcher else 1


def compare_dynamic(a: RoutePart | None, b: RoutePart | None) -> int:
    """``[x=m]`` < ``[x]`` < ``[...x]``; no parameter at all sorts first."""
    if a is None or b is None:
        if a is b:
            return 0
        return -1 if a is None else 1
    return _dynamic_rank(a) - _dynamic_rank(b)


def compare_segments(a: Segment, b: Segment) -> int:
    """Compare the shape of two segments part by part.

    Parts alternate literal/dynamic starting with a literal, so the two
    segments always line up by kind at each index.
    """
    for i in range(max(len(a), len(b))):
        pa = a[i] if i < len(a) else None
        pb = b[i] if i < len(b) else None

        if i % 2 == 0:
            result = compare_literal(pa.content if pa else "", pb.content if pb else "")
        else:
            result = compare_dynamic(pa, pb)

        if result:
            return result
    return 0


def compare_depth(a: _SortItem, b: _SortItem, depth: int) -> int:
    """Decide when one id has no segment at *depth*.

    The shorter id normally wins, but an id containing a rest parameter
    would swallow the longer id's remainder, so it yields instead.
    """
    missing_a = depth >= len(a.segments)
    missing_b = depth >= len(b.segments)
    if missing_a == missing_b:
        return 0
    if missing_a:
        return 1 if a.has_rest else -1
    return -1 if b.has_rest else 1


def compare_kind(a: RouteEntry, b: RouteEntry) -> int:
    """Endpoints are tried before pages that match the same paths."""
    if a.type == b.type:
        return 0
    return -1 if a.type == "endpoint" else 1


def compare_text(a: _SortItem, b: _SortItem) -> int:
    """Literal text segment by segment; parameter names never count."""
    if a.text == b.text:
        return 0
    return -1 if a.text < b.text else 1


def _compare(a: _SortItem, b: _SortItem) -> int:
    for depth in range(max(len(a.segments), len(b.segments))):
        result = compare_depth(a, b, depth)
        if result:
            return result

        result = compare_segments(a.segments[depth], b.segments[depth])
        if result:
            return result

    return compare_kind(a.route, b.route) or compare_text(a, b)


def _sort_item(route: RouteEntry) -> _SortItem:
    path_id = split_layout_ref(route.id)[0] if route.type == "page" else route.id
    segments = parse_route_id(path_id)
    has_rest = any(part.kind == "rest" for segment in segments for part in segment)
    text = tuple(tuple(part.content for part in segment[::2]) for segment in segments)
    return _SortItem(route=route, segments=segments, has_rest=has_rest, text=text)


def sort_routes(routes: Sequence[RouteEntry]) -> list[RouteEntry]:
    """Return *routes* in match order.

    Stable: routes that compare equal keep their input order, so sorting
    an already sorted list is a no-op.
    """
    items = [_sort_item(route) for route in routes]
    items.sort(key=cmp_to_key(_compare))
    return [item.route for item in items]

"""Filesystem-based routing with layout inheritance.

The routes directory structure defines route ids, layout nesting, and
error boundaries.

Conventions::

    src/routes/
      +layout.svelte            # Root layout
      +layout-marketing.svelte  # Named layout, opted into with @marketing
      +error.svelte             # Root error boundary
      +page.svelte              # /
      pricing@marketing.svelte  # /pricing, rendered in the marketing layout
      blog/
        +page.svelte            # /blog
        +page.server.js         # data for /blog
        [slug]/
          +page.svelte          # /blog/<slug>
        [slug].json/
          +server.js            # /blog/<slug>.json endpoint
"""

from perch.pages.layouts import LayoutGraph
from perch.pages.types import LayoutEntry, ResolvedChain
from perch.pages.walker import WalkEntry, walk

__all__ = [
    "LayoutEntry",
    "LayoutGraph",
    "ResolvedChain",
    "WalkEntry",
    "walk",
]

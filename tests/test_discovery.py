"""Tests for perch.pages.discovery — compiling a routes tree into a manifest."""

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from perch.config import ManifestConfig
from perch.errors import LayoutCycleError, LayoutError, RouteDefinitionError
from perch.pages.discovery import compile_manifest
from perch.pages.types import LayoutEntry
from perch.routing.route import EndpointRoute, PageRoute

type TreeBuilder = Callable[[Iterable[str]], Path]
type TreeWriter = Callable[[Path, Iterable[str]], Path]

R = "src/routes"

BLOG_TREE = [
    "+layout.svelte",
    "+page.svelte",
    "about/+page.svelte",
    "blog/+page.svelte",
    "blog/[slug]/+page.svelte",
    "blog.json/+server.js",
    "blog/[slug].json/+server.ts",
]


def _page(route: object) -> PageRoute:
    assert isinstance(route, PageRoute)
    return route


def _endpoint(route: object) -> EndpointRoute:
    assert isinstance(route, EndpointRoute)
    return route


class TestBlogExample:
    def test_route_order(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(BLOG_TREE)
        manifest = compile_manifest(config)
        assert [r.id for r in manifest.routes] == [
            "",
            "blog.json",
            "about",
            "blog",
            "blog/[slug].json",
            "blog/[slug]",
        ]

    def test_route_types(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(BLOG_TREE)
        manifest = compile_manifest(config)
        assert [r.type for r in manifest.routes] == ["page", "endpoint", "page", "page", "endpoint", "page"]

    def test_components(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(BLOG_TREE)
        manifest = compile_manifest(config)
        assert manifest.components == (
            f"{R}/+layout.svelte",
            "error.svelte",
            f"{R}/+page.svelte",
            f"{R}/about/+page.svelte",
            f"{R}/blog/+page.svelte",
            f"{R}/blog/[slug]/+page.svelte",
        )

    def test_page_entry(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(BLOG_TREE)
        slug = _page(compile_manifest(config).find("blog/[slug]"))
        assert slug.layouts == (LayoutEntry(f"{R}/+layout.svelte"),)
        assert slug.errors == ("error.svelte",)
        assert slug.page.component == f"{R}/blog/[slug]/+page.svelte"
        assert slug.page.server is None
        assert slug.match("/blog/hello-world") == {"slug": "hello-world"}

    def test_endpoint_entry(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(BLOG_TREE)
        manifest = compile_manifest(config)
        json_ep = _endpoint(manifest.find("blog/[slug].json"))
        assert json_ep.file == f"{R}/blog/[slug].json/+server.ts"
        assert json_ep.match("/blog/hello.json") == {"slug": "hello"}
        assert json_ep.match("/blog/hello.json/") is None

    def test_deterministic(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(BLOG_TREE)
        assert compile_manifest(config).to_dict() == compile_manifest(config).to_dict()


class TestEmptyTree:
    def test_missing_routes_dir(self, config: ManifestConfig) -> None:
        manifest = compile_manifest(config)
        assert manifest.routes == ()
        assert manifest.components == ("layout.svelte", "error.svelte")
        assert manifest.assets == ()
        assert dict(manifest.matchers) == {}

    def test_fallback_dir(self, tmp_path: Path) -> None:
        config = ManifestConfig(cwd=tmp_path, fallback_dir=tmp_path / "runtime" / "components")
        manifest = compile_manifest(config)
        assert manifest.components == (
            "runtime/components/layout.svelte",
            "runtime/components/error.svelte",
        )


class TestFiltering:
    def test_private_hidden_and_lockfiles(self, routes: TreeBuilder, tmp_path: Path) -> None:
        routes(
            [
                "_private/+page.svelte",
                ".hidden/+page.svelte",
                "_draft.svelte",
                "package-lock.json",
                "yarn.lock",
                "visible.svelte",
            ]
        )
        config = ManifestConfig(cwd=tmp_path, module_extensions=(".js", ".json"))
        manifest = compile_manifest(config)
        assert [r.id for r in manifest.routes] == ["visible"]

    def test_well_known_endpoint(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes([".well-known/dnt-policy.txt.js"])
        (route,) = compile_manifest(config).routes
        endpoint = _endpoint(route)
        assert endpoint.id == ".well-known/dnt-policy.txt"
        assert endpoint.match("/.well-known/dnt-policy.txt") == {}

    def test_unrelated_files_ignored(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["README.md", "styles.css", "+page.svelte"])
        assert [r.id for r in compile_manifest(config).routes] == [""]


class TestFileConventions:
    def test_named_page_files(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["about.svelte", "blog/index.svelte", "blog/archive.svelte"])
        ids = sorted(r.id for r in compile_manifest(config).routes)
        assert ids == ["about", "blog", "blog/archive"]

    def test_endpoint_files(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["api/index.js", "api/items.ts", "blog/index.json.js", "api/+server.js"])
        with pytest.raises(RouteDefinitionError, match="Duplicate route api"):
            compile_manifest(config)

    def test_endpoint_ids(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["api/index.js", "api/items.ts", "blog/index.json.js", "feed/+server.js"])
        manifest = compile_manifest(config)
        assert {r.id: _endpoint(r).file for r in manifest.routes} == {
            "api": f"{R}/api/index.js",
            "api/items": f"{R}/api/items.ts",
            "blog.json": f"{R}/blog/index.json.js",
            "feed": f"{R}/feed/+server.js",
        }

    def test_page_server(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["blog/+page.svelte", "blog/+page.server.js"])
        blog = _page(compile_manifest(config).find("blog"))
        assert blog.page.server == f"{R}/blog/+page.server.js"

    def test_orphan_page_server(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["blog/+page.server.js"])
        with pytest.raises(RouteDefinitionError, match="has no sibling \\+page component"):
            compile_manifest(config)

    def test_layout_server(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+layout.svelte", "+layout.server.ts", "+page.svelte"])
        home = _page(compile_manifest(config).find(""))
        assert home.layouts == (LayoutEntry(f"{R}/+layout.svelte", server=f"{R}/+layout.server.ts"),)

    def test_nested_error_boundary(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+error.svelte", "blog/+error.svelte", "blog/[slug]/+page.svelte"])
        manifest = compile_manifest(config)
        slug = _page(manifest.find("blog/[slug]"))
        assert slug.errors == (f"{R}/+error.svelte", f"{R}/blog/+error.svelte")
        assert manifest.components == (
            "layout.svelte",
            f"{R}/+error.svelte",
            f"{R}/blog/+error.svelte",
            f"{R}/blog/[slug]/+page.svelte",
        )

    def test_reserved_component_name(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+widget.svelte"])
        with pytest.raises(RouteDefinitionError, match="Files prefixed with \\+ are reserved"):
            compile_manifest(config)

    def test_reserved_module_name(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+hooks.js"])
        with pytest.raises(RouteDefinitionError, match="Files prefixed with \\+ are reserved"):
            compile_manifest(config)

    def test_layout_reference_in_directory(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["x@y/+page.svelte"])
        with pytest.raises(RouteDefinitionError, match="named layouts are not allowed in directories"):
            compile_manifest(config)

    def test_adjacent_parameters(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["[a][b]/+page.svelte"])
        with pytest.raises(RouteDefinitionError, match="parameters must be separated"):
            compile_manifest(config)

    def test_empty_layout_name(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+layout-.svelte"])
        with pytest.raises(RouteDefinitionError, match="Invalid layout name"):
            compile_manifest(config)


class TestExtensions:
    def test_custom_component_extensions(self, routes: TreeBuilder, tmp_path: Path) -> None:
        routes(["+page.svx", "about.svelte"])
        config = ManifestConfig(cwd=tmp_path, extensions=(".svelte", ".svx"))
        assert sorted(r.id for r in compile_manifest(config).routes) == ["", "about"]

    def test_earlier_extension_shadows(
        self, routes: TreeBuilder, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        routes(["+page.svx", "+page.svelte"])
        config = ManifestConfig(cwd=tmp_path, extensions=(".svelte", ".svx"))
        with caplog.at_level(logging.WARNING, logger="perch.discovery"):
            (route,) = compile_manifest(config).routes
        assert _page(route).page.component == f"{R}/+page.svelte"
        assert "shadows" in caplog.text

    def test_module_extension_shadows(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+server.ts", "+server.js"])
        (route,) = compile_manifest(config).routes
        assert _endpoint(route).file == f"{R}/+server.js"

    def test_mixed_extensions(self, routes: TreeBuilder, tmp_path: Path) -> None:
        routes(
            [
                "index.funk",
                "about.jazz",
                "blog/index.svelte",
                "blog/[slug].beebop",
                "blog/index.json.js",
                "blog/[slug].json.js",
            ]
        )
        config = ManifestConfig(cwd=tmp_path, extensions=(".jazz", ".beebop", ".funk", ".svelte"))
        manifest = compile_manifest(config)
        assert manifest.components == (
            "layout.svelte",
            "error.svelte",
            f"{R}/about.jazz",
            f"{R}/blog/[slug].beebop",
            f"{R}/blog/index.svelte",
            f"{R}/index.funk",
        )
        assert [r.id for r in manifest.routes] == [
            "",
            "blog.json",
            "about",
            "blog",
            "blog/[slug].json",
            "blog/[slug]",
        ]


class TestNamedLayouts:
    def test_page_selects_named_layout(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+layout.svelte", "+layout-marketing.svelte", "pricing@marketing.svelte", "blog/+page@marketing.svelte"])
        manifest = compile_manifest(config)
        pricing = _page(manifest.find("pricing@marketing"))
        assert pricing.layouts == (LayoutEntry(f"{R}/+layout-marketing.svelte"),)
        assert pricing.match("/pricing") == {}
        blog = _page(manifest.find("blog@marketing"))
        assert blog.match("/blog/") == {}

    def test_named_layout_with_default_parent(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+layout.svelte", "+layout-auth@default.svelte", "login/+page@auth.svelte"])
        login = _page(compile_manifest(config).find("login@auth"))
        assert [e.component for e in login.layouts] == [
            f"{R}/+layout.svelte",
            f"{R}/+layout-auth@default.svelte",
        ]
        assert login.errors == ("error.svelte", "error.svelte")

    def test_layout_files_listed_before_pages(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+layout.svelte", "+page.svelte", "admin/+layout-wide.svelte"])
        components = compile_manifest(config).components
        assert components.index(f"{R}/admin/+layout-wide.svelte") < components.index(f"{R}/+page.svelte")

    def test_missing_named_layout(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+page@nope.svelte"])
        with pytest.raises(LayoutError, match='references missing layout "nope"'):
            compile_manifest(config)

    def test_reserved_default_name(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+layout-default.svelte"])
        with pytest.raises(LayoutError, match='reserved "default" name'):
            compile_manifest(config)

    def test_cycle(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+layout-a@b.svelte", "+layout-b@a.svelte"])
        with pytest.raises(LayoutCycleError) as exc_info:
            compile_manifest(config)
        assert str(exc_info.value) == (
            f"Recursive layout detected: {R}/+layout-a@b.svelte -> "
            f"{R}/+layout-b@a.svelte -> {R}/+layout-a@b.svelte"
        )


class TestUniqueness:
    def test_page_file_and_directory(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["about/+page.svelte", "about.svelte"])
        with pytest.raises(RouteDefinitionError) as exc_info:
            compile_manifest(config)
        assert str(exc_info.value) == (
            f"Duplicate route about: {R}/about/+page.svelte and {R}/about.svelte"
        )

    def test_root_duplicate(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["+page.svelte", "index.svelte"])
        with pytest.raises(RouteDefinitionError, match="Duplicate route /"):
            compile_manifest(config)

    def test_components_have_no_duplicates(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(BLOG_TREE + ["+error.svelte", "docs/+layout.svelte", "docs/[...path]/+page.svelte"])
        components = compile_manifest(config).components
        assert len(components) == len(set(components))


class TestMatchers:
    def test_unknown_matcher(self, routes: TreeBuilder, config: ManifestConfig) -> None:
        routes(["items/[id=integer]/+page.svelte"])
        with pytest.raises(RouteDefinitionError, match='references unknown matcher "integer"'):
            compile_manifest(config)

    def test_known_matcher(
        self, routes: TreeBuilder, tmp_path: Path, config: ManifestConfig, write_tree: TreeWriter
    ) -> None:
        routes(["items/[id=integer]/+page.svelte"])
        write_tree(tmp_path / "src" / "params", ["integer.js"])
        manifest = compile_manifest(config)
        assert dict(manifest.matchers) == {"integer": "src/params/integer.js"}
        (route,) = manifest.routes
        assert route.params[0].matcher == "integer"

    def test_matchers_inside_routes_are_not_routes(self, routes: TreeBuilder, tmp_path: Path) -> None:
        routes(["[id=integer]/+page.svelte", "params/integer.js"])
        config = ManifestConfig(cwd=tmp_path, matchers_dir="src/routes/params")
        manifest = compile_manifest(config)
        assert dict(manifest.matchers) == {"integer": "src/routes/params/integer.js"}
        assert [r.id for r in manifest.routes] == ["[id=integer]"]

    def test_similar_directory_name_still_walked(self, routes: TreeBuilder, tmp_path: Path) -> None:
        routes(["params-docs/+page.svelte", "params/integer.js"])
        config = ManifestConfig(cwd=tmp_path, matchers_dir="src/routes/params")
        assert [r.id for r in compile_manifest(config).routes] == ["params-docs"]


class TestAssets:
    def test_assets_included(self, tmp_path: Path, config: ManifestConfig, write_tree: TreeWriter) -> None:
        write_tree(tmp_path / "static", ["favicon.png"])
        (asset,) = compile_manifest(config).assets
        assert asset.file == "favicon.png"
        assert asset.type == "image/png"

    def test_assets_inside_routes_are_not_routes(
        self, routes: TreeBuilder, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        routes(["+page.svelte", "static/app.js", "static/logo.svelte"])
        config = ManifestConfig(cwd=tmp_path, assets_dir="src/routes/static")
        with caplog.at_level(logging.DEBUG, logger="perch.discovery"):
            manifest = compile_manifest(config)
        assert [r.id for r in manifest.routes] == [""]
        assert [a.file for a in manifest.assets] == ["app.js", "logo.svelte"]
        assert "Skipping static/app.js" in caplog.text

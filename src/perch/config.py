"""Manifest configuration.

ManifestConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.  Loading and merging user configuration happens
elsewhere; perch only consumes the normalized result.
"""

from dataclasses import dataclass
from pathlib import Path

from perch.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ManifestConfig:
    """Manifest compiler configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ManifestConfig(routes_dir="app/routes", extensions=(".svelte", ".md"))

    Relative directories are resolved against ``cwd``.
    """

    # Source directories
    routes_dir: str | Path = "src/routes"
    assets_dir: str | Path = "static"
    matchers_dir: str | Path = "src/params"

    # Generated output (``perch sync``)
    output_dir: str | Path = ".perch/generated"

    # Ordered: the first matching suffix wins, and an earlier extension
    # shadows a later one for the same logical file
    extensions: tuple[str, ...] = (".svelte",)
    module_extensions: tuple[str, ...] = (".js", ".ts")

    # Manifest paths are relative to cwd; None means the process cwd
    cwd: str | Path | None = None

    # Runtime-provided layout and error components, independent of `extensions`;
    # fallback_dir None means cwd
    fallback_dir: str | Path | None = None
    fallback_layout: str = "layout.svelte"
    fallback_error: str = "error.svelte"

    def validate(self) -> None:
        """Raise ``ConfigurationError`` if the extension settings are unusable."""
        if not self.extensions:
            msg = "ManifestConfig.extensions must contain at least one extension"
            raise ConfigurationError(msg)

        for ext in (*self.extensions, *self.module_extensions):
            if not ext.startswith(".") or len(ext) < 2:
                msg = f"Invalid extension {ext!r} — extensions must start with '.'"
                raise ConfigurationError(msg)

        overlap = sorted(set(self.extensions) & set(self.module_extensions))
        if overlap:
            msg = (
                f"Extension {overlap[0]!r} is configured as both a component "
                "and a module extension"
            )
            raise ConfigurationError(msg)

    @property
    def working_dir(self) -> Path:
        """Directory manifest paths are relative to."""
        return Path(self.cwd) if self.cwd is not None else Path.cwd()

    def resolve(self, directory: str | Path) -> Path:
        """Resolve a configured directory against the working directory."""
        return self.working_dir / directory

    @property
    def default_layout(self) -> Path:
        """Built-in layout used when the routes root declares none."""
        base = Path(self.fallback_dir) if self.fallback_dir is not None else self.working_dir
        return base / self.fallback_layout

    @property
    def default_error(self) -> Path:
        """Built-in error boundary used when the routes root declares none."""
        base = Path(self.fallback_dir) if self.fallback_dir is not None else self.working_dir
        return base / self.fallback_error

"""Perch exception hierarchy.

Shared across the walker, pattern compiler, layout resolver, and manifest
assembler so every module raises and catches the same types.  Every error
is fatal to the compile that raised it.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when the manifest configuration is invalid.

    Typically raised by ``ManifestConfig.validate()`` before any
    filesystem access happens.
    """


class RouteDefinitionError(PerchError):
    """Raised when a file in the routes directory defines an invalid route.

    The message always names the offending file relative to the working
    directory.
    """


class LayoutError(RouteDefinitionError):
    """Named-layout misuse: reserved name, duplicate, or missing target."""


class LayoutCycleError(LayoutError):
    """A named-layout parent chain revisits a layout already being resolved.

    ``chain`` lists the layout files in traversal order, with the first
    file repeated at the end to close the loop.
    """

    def __init__(self, chain: tuple[str, ...]) -> None:
        self.chain = chain
        super().__init__(f"Recursive layout detected: {' -> '.join(chain)}")


class MatcherError(ConfigurationError):
    """A parameter matcher module has an invalid or duplicate name."""

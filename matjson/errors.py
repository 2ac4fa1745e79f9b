# matjson/errors.py


class MaterialJsonError(ValueError):
    """Base class for all conversion errors. Carries the document key path."""
    def __init__(self, message, path=None):
        self.path = tuple(str(p) for p in path) if path else ()
        self.reason = message
        if self.path:
            message = f"{'/'.join(self.path)}: {message}"
        super().__init__(message)


class MalformedDocument(MaterialJsonError):
    """An expected field is missing or has the wrong shape."""


class DimensionMismatch(MaterialJsonError):
    """Binned material data does not match the declared bin counts."""


class UnknownAxisKind(MaterialJsonError):
    """A binning value token is not one of the known axis kinds."""


class IdentifierOverflow(MaterialJsonError):
    """A hierarchy field does not fit into its bit range."""


class UnresolvableIdentifier(MaterialJsonError):
    """No explicit geoid and not enough positional context to build one."""

"""Exception hierarchy for gnpguard.

Validation failures are never raised: they come back as verdicts. Only the
conditions below surface as exceptions.
"""


class GnpGuardError(Exception):
    """Base class for every error raised by gnpguard."""


class TransportError(GnpGuardError):
    """
    The cloud API or the cluster cache could not be read.

    This is not a validation outcome. Callers skip the status update and
    retry later.
    """


class ResourceNotFoundError(GnpGuardError):
    """A named cloud object or cluster resource does not exist."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind} '{name}' not found")
        self.kind = kind
        self.name = name


class ManifestError(GnpGuardError):
    """A manifest or inventory file could not be read or understood."""

    def __init__(self, path, detail: str):
        super().__init__(f"{path}: {detail}")
        self.path = str(path)
        self.detail = detail

"""Error taxonomy for store access and link mutations."""


class NoteStoreError(RuntimeError):
    """The note store could not complete a request."""


class FetchFailure(NoteStoreError):
    """Notes or a note's link list could not be read."""


class MutationFailure(NoteStoreError):
    """A link-list write was rejected or did not reach the store."""


class LinkConflict(ValueError):
    """The edge being created already exists."""

    def __init__(self, source: str, target: str) -> None:
        super().__init__(f"Link {source} -> {target} already exists")
        self.source = source
        self.target = target


class SelfLink(ValueError):
    """A note cannot link to itself."""


class UnknownNode(LookupError):
    """A mutation named a note that is not in the current graph."""


class ConfigError(ValueError):
    """Configuration file or environment is invalid."""

"""Exception hierarchy for gmail-filters.

Every error the pipeline raises derives from GmailFiltersError. Errors may carry
a free-form ``details`` block (e.g. a dump of the offending rule) which the CLI
prints below the message.
"""


class GmailFiltersError(Exception):
    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.details = details


class ConfigError(GmailFiltersError):
    """Config file missing, unreadable, of the wrong version or not matching the schema."""


class CriteriaSyntaxError(GmailFiltersError):
    """Malformed filter node (zero or several populated fields, misplaced isRaw)."""


class SemanticError(GmailFiltersError):
    """Well-formed rule that cannot be turned into a Gmail filter."""


class RuleError(GmailFiltersError):
    """Parse or generation failure attributed to a specific rule."""

    def __init__(self, index: int, cause: GmailFiltersError, details: str | None = None):
        super().__init__(f"rule #{index}: {cause}", details)
        self.index = index


class LabelValidationError(GmailFiltersError):
    pass


class DiffValidationError(GmailFiltersError):
    """The computed diff is unsafe to apply."""


class FilterExportError(GmailFiltersError):
    pass


class UnsupportedFilterError(GmailFiltersError):
    """A single remote filter uses features that have no config equivalent."""


class FilterImportError(GmailFiltersError):
    """One or more remote filters could not be imported.

    ``errors`` maps the remote filter ID to the reason it was rejected, and
    ``filters`` holds the ones that were imported fine.
    """

    def __init__(self, errors: dict[str, str], filters: list | None = None):
        lines = [f"importing filter {fid!r}: {reason}" for fid, reason in errors.items()]
        super().__init__(f"{len(errors)} filter(s) could not be imported", "\n".join(lines))
        self.errors = errors
        self.filters = filters or []


class RemoteError(GmailFiltersError):
    """A Gmail API call failed. The underlying HttpError is chained as __cause__."""


class AuthError(GmailFiltersError):
    """The OAuth token file is missing or unusable."""

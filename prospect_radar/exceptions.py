"""Exceptions raised by the prospecting core."""


class ProspectRadarError(Exception):
    """Base class for all errors raised by prospect_radar."""


class TaxonomyError(ProspectRadarError):
    """The offering taxonomy is missing or structurally invalid."""


class ImportFormatError(ProspectRadarError):
    """An imported contact table lacks the expected columns or rows.

    The message is meant to be shown to the user as-is.
    """


class LedgerReentryError(ProspectRadarError, RuntimeError):
    """A ledger subscriber tried to mutate the ledger while being notified."""

"""
Soft failures of the search pipeline.

Each component raises these internally and catches them at its own boundary:
the caller sees an empty or partial contribution, never the exception.
"""


class SoftError(Exception):
    """A failure that degrades a component's output without aborting the request."""


class ProviderUnavailable(SoftError):
    """Search provider transport error, non-2xx status or unreadable body."""


class ScrapeFailure(SoftError):
    """Posting detail page could not be fetched."""


class SummarizationFailure(SoftError):
    """Text-generation call for a summary failed."""


class QueryCleanupFailure(SoftError):
    """Language model returned nothing usable for query cleanup."""

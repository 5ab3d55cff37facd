"""Custom exception hierarchy for the moment engine."""


class MomentEngineError(Exception):
    """Base exception for all moment engine errors."""


class ConfigurationError(MomentEngineError):
    """Error in system configuration."""


class CollectionError(MomentEngineError):
    """Error fetching raw items from an upstream source."""


class SourceTimeoutError(CollectionError):
    """An upstream source did not answer within its timeout."""


class StoreError(MomentEngineError):
    """Error reading or writing the moment store."""

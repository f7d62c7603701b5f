"""Error taxonomy for the NutriScan core."""


class NutriScanError(Exception):
    """Base class for errors raised by the NutriScan core."""


class UnavailableData(NutriScanError):
    """A product or additive source could not be fetched."""


class StorageFailure(NutriScanError):
    """Reading or writing persisted state failed."""


class MalformedRecord(NutriScanError):
    """A product record is missing identity fields or has an unusable shape."""

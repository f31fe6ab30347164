"""Errors raised by the import pipeline."""


class VariantPhenotypesError(Exception):
    """Base class for all errors raised by this package."""


class MalformedRecordError(VariantPhenotypesError):
    """A ClinVar set could not be turned into a flat record.

    Carries the serialized XML of the offending record so the operator can
    inspect it. Fatal: the import stops on the first one.
    """

    def __init__(self, message: str, record_xml: str = ""):
        super().__init__(message)
        self.record_xml = record_xml


class MissingSourceError(VariantPhenotypesError):
    """The data source row the import writes against is not in the database."""


class HGVSParseError(VariantPhenotypesError, ValueError):
    """An HGVS genomic notation could not be turned into an allele pair."""

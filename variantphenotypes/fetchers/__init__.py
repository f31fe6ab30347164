"""Readers for annotation source releases."""

from .clinvar import download_clinvar_xml, extract_record, fetch_clinvar, iter_clinvar_sets

__all__ = [
    "download_clinvar_xml",
    "extract_record",
    "fetch_clinvar",
    "iter_clinvar_sets",
]

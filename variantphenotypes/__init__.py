"""Import ClinVar variant/phenotype annotations into a variation database."""

__version__ = "0.1.0"

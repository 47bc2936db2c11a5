"""Reionization and charge neutralization for molecular structure standardization."""

from molcharge.tools.core_mol import (
    AcidBaseCatalog,
    AcidBaseCatalogError,
    AcidBasePair,
    ChargeCorrection,
    Reionizer,
    ReionizeOutcome,
    SiteMatch,
    Uncharger,
    charge_parent,
    clear_catalog_cache,
    load_acid_base_catalog,
    make_charge_corrections,
    read_acid_base_pairs,
)

__version__ = "0.1.0"

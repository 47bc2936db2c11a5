# Core molecular charge tools exports
from .acid_base import (
    AcidBaseCatalog,
    AcidBaseCatalogError,
    AcidBasePair,
    ChargeCorrection,
    clear_catalog_cache,
    load_acid_base_catalog,
    make_charge_corrections,
    read_acid_base_pairs,
)
from .reionizer import Reionizer, ReionizeOutcome, SiteMatch
from .uncharger import Uncharger
from .smiles_ops import charge_parent

__all__ = [
    'AcidBaseCatalog',
    'AcidBaseCatalogError',
    'AcidBasePair',
    'ChargeCorrection',
    'clear_catalog_cache',
    'load_acid_base_catalog',
    'make_charge_corrections',
    'read_acid_base_pairs',
    'Reionizer',
    'ReionizeOutcome',
    'SiteMatch',
    'Uncharger',
    'charge_parent',
]

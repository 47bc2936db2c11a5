"""
Charge cleaning tools for molecular datasets.

- charge_cleaning: reionization, uncharging and charge parents for SMILES
  lists and dataset columns
"""

from .charge_cleaning import (
    reionize_smiles,
    reionize_smiles_dataset,
    uncharge_smiles,
    uncharge_smiles_dataset,
    standardize_charges,
    standardize_charges_dataset,
    charge_parent_smiles,
    charge_parent_smiles_dataset,
    net_charge_smiles,
    get_all_charge_tools,
)

__all__ = [
    "reionize_smiles",
    "reionize_smiles_dataset",
    "uncharge_smiles",
    "uncharge_smiles_dataset",
    "standardize_charges",
    "standardize_charges_dataset",
    "charge_parent_smiles",
    "charge_parent_smiles_dataset",
    "net_charge_smiles",
    "get_all_charge_tools",
]

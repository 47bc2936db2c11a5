from typing import Optional

from rdkit.Chem import MolFromSmiles, MolToSmiles
from rdkit.Chem.MolStandardize import rdMolStandardize
from rdkit.Chem.rdchem import Mol

from molcharge.tools.core_mol.atom_ops import net_charge
from molcharge.tools.core_mol.reionizer import Reionizer, ReionizeOutcome
from molcharge.tools.core_mol.uncharger import Uncharger


ABORTED_COMMENT = "Passed, reionization aborted: ambiguous proton placement"


def _is_invalid_smiles(smi) -> bool:
    return not isinstance(smi, str)


def _parse(smi) -> Optional[Mol]:
    if _is_invalid_smiles(smi):
        return None
    return MolFromSmiles(smi)


def charge_parent(mol: Mol, reionizer: Optional[Reionizer] = None, uncharger: Optional[Uncharger] = None) -> Mol:
    """ Largest fragment of `mol`, reionized and then uncharged. Returns a new molecule. """
    reionizer = reionizer or Reionizer()
    uncharger = uncharger or Uncharger()

    parent = rdMolStandardize.LargestFragmentChooser().choose(mol)
    reionizer.reionize_in_place(parent)
    uncharger.uncharge_in_place(parent)
    return parent


def _reionize_smiles(smi: str, reionizer: Optional[Reionizer] = None) -> tuple[str, str]:
    """ Reionize a single SMILES string. Returns canonical SMILES and comment. """
    mol = _parse(smi)
    if mol is None:
        return None, "Failed: Invalid SMILES string"

    reionizer = reionizer or Reionizer()
    try:
        outcome = reionizer.reionize_in_place(mol)
        new_smi = MolToSmiles(mol, canonical=True, isomericSmiles=True)
    except Exception as e:
        return None, f"Failed: Reionization error: {str(e)}"

    if outcome is ReionizeOutcome.ABORTED:
        return new_smi, ABORTED_COMMENT
    return new_smi, "Passed"


def _uncharge_smiles(smi: str, uncharger: Optional[Uncharger] = None) -> tuple[str, str]:
    """ Neutralize a single SMILES string. Returns canonical SMILES and comment. """
    mol = _parse(smi)
    if mol is None:
        return None, "Failed: Invalid SMILES string"

    uncharger = uncharger or Uncharger()
    try:
        uncharger.uncharge_in_place(mol)
        return MolToSmiles(mol, canonical=True, isomericSmiles=True), "Passed"
    except Exception as e:
        return None, f"Failed: Uncharging error: {str(e)}"


def _standardize_charges_smiles(smi: str, reionizer: Optional[Reionizer] = None,
                                uncharger: Optional[Uncharger] = None) -> tuple[str, str]:
    """ Reionize, then uncharge, a single SMILES string. """
    mol = _parse(smi)
    if mol is None:
        return None, "Failed: Invalid SMILES string"

    reionizer = reionizer or Reionizer()
    uncharger = uncharger or Uncharger()
    try:
        outcome = reionizer.reionize_in_place(mol)
        uncharger.uncharge_in_place(mol)
        new_smi = MolToSmiles(mol, canonical=True, isomericSmiles=True)
    except Exception as e:
        return None, f"Failed: {str(e)}"

    if outcome is ReionizeOutcome.ABORTED:
        return new_smi, ABORTED_COMMENT
    return new_smi, "Passed"


def _charge_parent_smiles(smi: str, reionizer: Optional[Reionizer] = None,
                          uncharger: Optional[Uncharger] = None) -> tuple[str, str]:
    """ Charge parent of a single SMILES string (largest fragment, reionized and uncharged). """
    mol = _parse(smi)
    if mol is None:
        return None, "Failed: Invalid SMILES string"

    try:
        parent = charge_parent(mol, reionizer=reionizer, uncharger=uncharger)
        return MolToSmiles(parent, canonical=True, isomericSmiles=True), "Passed"
    except Exception as e:
        return None, f"Failed: {str(e)}"


def _net_charge_smiles(smi: str) -> tuple[int, str]:
    """ Net formal charge of a SMILES string. """
    mol = _parse(smi)
    if mol is None:
        return None, "Failed: Invalid SMILES string"
    return net_charge(mol), "Passed"

from rdkit.Chem import GetPeriodicTable, GetFormalCharge, MolFromSmarts
from rdkit.Chem.rdchem import Atom, Mol

from molcharge.constants import EARLY_ELEMENTS


def compile_smarts(smarts: str) -> Mol:
    query = MolFromSmarts(smarts)
    if query is None:
        raise ValueError(f"Invalid SMARTS pattern: {smarts}")
    return query


def is_early_atom(atomic_num: int) -> bool:
    """ True for elements whose hydrides carry hydride-like hydrogens (alkali, alkaline earth, boron group metals, transition metals). """
    return atomic_num in EARLY_ELEMENTS


def allowed_valences(atomic_num: int) -> tuple[int, ...]:
    """ Default valence states of an element; -1 marks an element without a fixed valence. """
    return tuple(GetPeriodicTable().GetValenceList(atomic_num))


def refresh_atom(atom: Atom) -> None:
    """ Recompute implicit hydrogens and valence after a charge or hydrogen edit. """
    atom.UpdatePropertyCache(strict=False)


def refresh_mol(mol: Mol) -> None:
    if mol.NeedsUpdatePropertyCache():
        mol.UpdatePropertyCache(strict=False)


def net_charge(mol: Mol) -> int:
    return GetFormalCharge(mol)

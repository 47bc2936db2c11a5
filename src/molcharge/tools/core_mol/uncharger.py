"""
Neutralize a molecule by adding/removing hydrogens, keeping charges that have
to stay (quaternary cations and the anions that balance them).

    >>> from rdkit import Chem
    >>> Chem.MolToSmiles(Uncharger().uncharge(Chem.MolFromSmiles("[NH3+]CC(=O)[O-]")))
    'NCC(=O)O'

With `force=True` every removable charge is neutralized even if that leaves a
net charge behind. With `canonical_ordering=True` (the default) the choice of
which of several equivalent anions to neutralize does not depend on the
input atom order.
"""

import logging

from rdkit.Chem import CanonicalRankAtoms, Mol

from molcharge.constants import UNCHARGER_PATTERNS
from molcharge.tools.core_mol.atom_ops import compile_smarts, is_early_atom, net_charge, refresh_atom, refresh_mol

logger = logging.getLogger(__name__)


def _neutralize_neg(atom, h_delta: int = 1) -> None:
    atom.SetNumExplicitHs(atom.GetTotalNumHs() + h_delta)
    atom.SetNoImplicit(True)
    atom.SetFormalCharge(atom.GetFormalCharge() + 1)
    logger.info("Removed negative charge.")
    refresh_atom(atom)


def _neutralize_neg_if_possible(atom) -> bool:
    """ Add a proton to an anion (or, for early elements, remove a hydride). False if the atom has to be left alone. """
    early = is_early_atom(atom.GetAtomicNum())
    if early and not atom.GetTotalNumHs():
        return False
    _neutralize_neg(atom, -1 if early else 1)
    return True


class Uncharger:
    """
    Neutralize ionized acids and bases.

    Parameters
    ----------
    force : bool
        Neutralize all removable negative charges, without keeping the ones
        that balance hydrogen-free cations.
    canonical_ordering : bool
        Pick sites by canonical atom rank instead of atom index.
    """

    def __init__(self, force: bool = False, canonical_ordering: bool = True):
        self.force = force
        self.canonical_ordering = canonical_ordering
        self.pos_h = compile_smarts(UNCHARGER_PATTERNS["pos_h"])
        self.pos_noh = compile_smarts(UNCHARGER_PATTERNS["pos_noh"])
        self.neg = compile_smarts(UNCHARGER_PATTERNS["neg"])
        self.neg_acid = compile_smarts(UNCHARGER_PATTERNS["neg_acid"])

    def __repr__(self):
        return f"Uncharger(force={self.force}, canonical_ordering={self.canonical_ordering})"

    def uncharge(self, mol: Mol) -> Mol:
        """ Return a neutralized copy of `mol`. """
        out = Mol(mol)
        self.uncharge_in_place(out)
        return out

    def uncharge_in_place(self, mol: Mol) -> None:
        logger.info("Running Uncharger")
        refresh_mol(mol)

        p_matches = mol.GetSubstructMatches(self.pos_h)
        q_matches = mol.GetSubstructMatches(self.pos_noh)
        n_matches = mol.GetSubstructMatches(self.neg)
        a_matches = mol.GetSubstructMatches(self.neg_acid)

        # positive charge that cannot be removed by taking away a hydrogen
        q_charge = sum(mol.GetAtomWithIdx(m[0]).GetFormalCharge() for m in q_matches)

        needs_neutralization = q_charge > 0 and (len(n_matches) > 0 or len(a_matches) > 0)
        if self.canonical_ordering and needs_neutralization:
            ranks = list(CanonicalRankAtoms(mol))
        else:
            ranks = list(range(mol.GetNumAtoms()))

        n_atoms = [(ranks[m[0]], m[0]) for m in n_matches]
        a_atoms = [(ranks[m[0]], m[0]) for m in a_matches]
        if self.canonical_ordering:
            n_atoms.sort()
            a_atoms.sort()

        neg_atoms = self._neutralization_candidates(mol, n_atoms, a_atoms)

        # Unless forced, leave as many anions as there are hydrogen-free cations to balance.
        neg_surplus = len(neg_atoms)
        if not self.force:
            neg_surplus -= q_charge

        # More fixed cations than anions leaves a negative surplus: every anion
        # stays charged. RDKit's Uncharger neutralizes all of them in that case.
        if neg_surplus > 0:
            for _, idx in neg_atoms:
                if _neutralize_neg_if_possible(mol.GetAtomWithIdx(idx)):
                    neg_surplus -= 1
                    if neg_surplus == 0:
                        break

        charge = net_charge(mol)
        if charge > 0:
            self._neutralize_cations(mol, p_matches, charge)

    @staticmethod
    def _neutralization_candidates(mol: Mol, n_atoms: list, a_atoms: list) -> list:
        """ Plain anions first, then acid anions; an acid anion sharing a cation with an earlier one is dropped. """
        acid_idx = {idx for _, idx in a_atoms}
        candidates = [pair for pair in n_atoms if pair[1] not in acid_idx]

        # e.g. nitrate: [O-][N+](=O)[O-] is neutralized once, not twice
        claimed_cations = set()
        skipped = set()
        for _, idx in a_atoms:
            for nbr in mol.GetAtomWithIdx(idx).GetNeighbors():
                if nbr.GetFormalCharge() > 0:
                    if nbr.GetIdx() in claimed_cations:
                        skipped.add(idx)
                    else:
                        claimed_cations.add(nbr.GetIdx())
                    break
        candidates.extend(pair for pair in a_atoms if pair[1] not in skipped)
        return candidates

    @staticmethod
    def _neutralize_cations(mol: Mol, p_matches, charge: int) -> int:
        """ Remove protons (or add hydrides) on hydrogen-bearing cations until the net charge is zero. """
        for idx in (i for match in p_matches for i in match):
            atom = mol.GetAtomWithIdx(idx)
            # atoms from mol blocks often carry their hydrogens implicitly
            atom.SetNumExplicitHs(atom.GetTotalNumHs())
            atom.SetNoImplicit(True)
            while atom.GetFormalCharge() > 0 and charge > 0:
                atom.SetFormalCharge(atom.GetFormalCharge() - 1)
                charge -= 1
                last_h_removed = False
                if atom.GetAtomicNum() != 6 and not is_early_atom(atom.GetAtomicNum()):
                    n_explicit = atom.GetNumExplicitHs()
                    if n_explicit >= 1:
                        atom.SetNumExplicitHs(n_explicit - 1)
                    last_h_removed = n_explicit == 1
                else:
                    atom.SetNumExplicitHs(atom.GetNumExplicitHs() + 1)
                logger.info("Removed positive charge.")
                refresh_atom(atom)
                if last_h_removed:
                    break
            if charge == 0:
                break
        return charge

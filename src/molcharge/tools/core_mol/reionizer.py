"""
Reionization: put charges where the acid/base chemistry says they belong.

The Reionizer first forces the charge of a few free inorganic ions (see
`CHARGE_CORRECTIONS`), then repeatedly moves a proton from the strongest
protonated acid to the weakest ionized base until no transfer is an
improvement. Partial progress is always kept.

    >>> from rdkit import Chem
    >>> mol = Chem.MolFromSmiles("C1=C(C=CC(=C1)[S]([O-])=O)[S](O)(=O)=O")
    >>> Chem.MolToSmiles(Reionizer().reionize(mol))
    'O=S(O)c1ccc(S(=O)(=O)[O-])cc1'

Known limitation: the loop guards against a proton bouncing between the same
two atoms and against an acid and base matching on one atom. A proton cycling
over three or more sites is not detected.
"""

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterable, Optional, Sequence, Union

from rdkit.Chem import Mol

from molcharge.tools.core_mol.acid_base import AcidBaseCatalog, load_acid_base_catalog, make_charge_corrections
from molcharge.tools.core_mol.atom_ops import allowed_valences, net_charge, refresh_atom, refresh_mol

logger = logging.getLogger(__name__)


class ReionizeOutcome(enum.Enum):
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True)
class SiteMatch:
    """A catalog pattern hit: the pair's acid-strength rank and the matched atom indices."""
    rank: int
    indices: tuple

    @property
    def site(self) -> int:
        # the reactive atom is always the last one in the pattern
        return self.indices[-1]


class Reionizer:
    """
    Rebalance ionization states using an acid/base pair catalog.

    Parameters
    ----------
    acid_base_file : str or Path, optional
        Catalog file to use instead of the packaged one.
    acid_base_data : sequence of (acid SMARTS, base SMARTS, name), optional
        Inline catalog, strongest acid first.
    acid_base_stream : file-like, optional
        Catalog text stream.
    corrections : iterable, optional
        ChargeCorrection objects or (name, smarts, charge) triples replacing
        the default correction table.
    catalog : AcidBaseCatalog, optional
        An already built catalog to share.

    At most one catalog source may be given. Catalogs are memoized by source,
    so Reionizers built from the same source share one catalog.
    """

    def __init__(
        self,
        acid_base_file: Optional[Union[str, Path]] = None,
        acid_base_data: Optional[Sequence[Sequence[str]]] = None,
        acid_base_stream: Optional[IO] = None,
        corrections: Optional[Iterable] = None,
        catalog: Optional[AcidBaseCatalog] = None,
    ):
        if catalog is not None:
            if any(s is not None for s in (acid_base_file, acid_base_data, acid_base_stream)):
                raise ValueError("Give either a catalog or a catalog source, not both")
            self.catalog = catalog
        else:
            self.catalog = load_acid_base_catalog(path=acid_base_file, data=acid_base_data, stream=acid_base_stream)
        self.corrections = make_charge_corrections(corrections)

    def __repr__(self):
        return f"Reionizer(catalog={self.catalog.source!r}, corrections={len(self.corrections)})"

    def reionize(self, mol: Mol) -> Mol:
        """ Return a reionized copy of `mol`. """
        out = Mol(mol)
        self.reionize_in_place(out)
        return out

    def reionize_in_place(self, mol: Mol) -> ReionizeOutcome:
        """ Reionize `mol` in place. Returns ABORTED when proton placement was ambiguous; changes made so far are kept. """
        refresh_mol(mol)
        start_charge = net_charge(mol)

        self.apply_corrections(mol)
        current_charge = net_charge(mol)
        charge_diff = current_charge - start_charge

        # A neutral molecule is assumed fixed. If the corrections made it more
        # positive, ionize acids to compensate.
        if current_charge != 0:
            while charge_diff > 0:
                hit = self.strongest_protonated(mol)
                if hit is None:
                    break
                logger.info(f"Ionizing {self.catalog[hit.rank].name} to balance previous charge corrections")
                atom = mol.GetAtomWithIdx(hit.site)
                atom.SetFormalCharge(atom.GetFormalCharge() - 1)
                if atom.GetNumExplicitHs() > 0:
                    atom.SetNumExplicitHs(atom.GetNumExplicitHs() - 1)
                refresh_atom(atom)
                charge_diff -= 1

        return self._swap_protons(mol)

    def apply_corrections(self, mol: Mol) -> None:
        """ Force the charge of every atom matched by a correction, in table order. """
        for cc in self.corrections:
            for match in mol.GetSubstructMatches(cc.pattern):
                for idx in match:
                    atom = mol.GetAtomWithIdx(idx)
                    logger.info(f"Applying charge correction {cc.name} {atom.GetSymbol()} {cc.charge}")
                    atom.SetFormalCharge(cc.charge)
                    refresh_atom(atom)

    def strongest_protonated(self, mol: Mol) -> Optional[SiteMatch]:
        """ First acid pattern that matches, scanning strongest acid first. """
        for rank, pair in enumerate(self.catalog):
            match = mol.GetSubstructMatch(pair.acid)
            if match:
                return SiteMatch(rank, tuple(match))
        return None

    def weakest_ionized(self, mol: Mol) -> Optional[SiteMatch]:
        """ First base pattern that matches, scanning weakest conjugate base first. """
        for rank in reversed(range(len(self.catalog))):
            match = mol.GetSubstructMatch(self.catalog[rank].base)
            if match:
                return SiteMatch(rank, tuple(match))
        return None

    def _swap_protons(self, mol: Mol) -> ReionizeOutcome:
        already_moved = set()
        while True:
            protonated = self.strongest_protonated(mol)
            ionized = self.weakest_ionized(mol)
            if protonated is None or ionized is None or protonated.rank >= ionized.rank:
                return ReionizeOutcome.DONE

            if protonated.site == ionized.site:
                # the proton would not move and the loop would never end
                logger.info("Aborted reionization due to unexpected situation")
                return ReionizeOutcome.ABORTED

            key = frozenset((protonated.site, ionized.site))
            if key in already_moved:
                logger.info("Aborting reionization to avoid infinite loop due to it being ambiguous where to put a Hydrogen")
                return ReionizeOutcome.ABORTED
            already_moved.add(key)

            logger.info(f"Moved proton from {self.catalog[protonated.rank].name} to {self.catalog[ionized.rank].name}")
            _remove_proton(mol.GetAtomWithIdx(protonated.site))
            _add_proton(mol.GetAtomWithIdx(ionized.site))


def _remove_proton(atom) -> None:
    # implicit Hs adjust themselves on refresh; explicit ones must be removed by hand
    needs_explicit = atom.GetNumImplicitHs() == 0 and atom.GetNumExplicitHs() > 0
    atom.SetFormalCharge(atom.GetFormalCharge() - 1)
    if needs_explicit:
        atom.SetNumExplicitHs(atom.GetNumExplicitHs() - 1)
    refresh_atom(atom)


def _add_proton(atom) -> None:
    # valence of the site as it stands, before the new proton is placed
    valence = atom.GetTotalValence()
    atom.SetFormalCharge(atom.GetFormalCharge() + 1)
    aromatic_n_or_p = atom.GetIsAromatic() and atom.GetAtomicNum() in (7, 15)
    if atom.GetNoImplicit() or aromatic_n_or_p or valence not in allowed_valences(atom.GetAtomicNum()):
        atom.SetNumExplicitHs(atom.GetNumExplicitHs() + 1)
    refresh_atom(atom)

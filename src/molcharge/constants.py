"""
Constants for molcharge package.

CHARGE_CORRECTIONS: (name, SMARTS, forced charge) rules for small inorganic ions.
UNCHARGER_PATTERNS: SMARTS for the four charge-site classes used by the Uncharger.
EARLY_ELEMENTS: Atomic numbers whose hydrides donate a hydride-like hydrogen.

"""

from __future__ import annotations
from typing import Dict, FrozenSet, Tuple


# Free, unbonded ions whose charge state is always forced. Table order is
# authoritative: later rules overwrite earlier ones on overlapping atoms.
CHARGE_CORRECTIONS: Tuple[Tuple[str, str, int], ...] = (
    ("[Li,Na,K]", "[Li,Na,K;X0+0]", 1),
    ("[Mg,Ca]", "[Mg,Ca;X0+0]", 2),
    ("[Cl]", "[Cl;X0+0]", -1),
)


UNCHARGER_PATTERNS: Dict[str, str] = {
    # cations with hydrogens, not paired to a single anion
    "pos_h": "[+,+2,+3,+4;!h0;!$(*~[-]),$(*(~[-])~[-])]",
    # hydrogen-free cations, not paired to an anion
    "pos_noh": "[+,+2,+3,+4;h0;!$(*~[-])]",
    # anions not paired to a cation
    "neg": "[-!$(*~[+,+2,+3,+4])]",
    "neg_acid": (
        # carboxylate, carbonate, sulfi(a)te and their thio-analogues
        "[$([O,S;-][C,S;+0]=[O,S]),"
        # phosphi(a)te, nitrate and their thio-analogues
        "$([O,S;-][N,P;+](=[O,S])[O,S;-]),"
        # hali(a)te, perhalate
        "$([O-][Cl,Br,I;+,+2,+3][O-]),"
        # tetrazole
        "$([n-]1nnnc1),$([n-]1ncnn1)]"
    ),
}


EARLY_ELEMENTS: FrozenSet[int] = frozenset(
    [3, 4, 5, 11, 12, 13]
    + list(range(19, 32))
    + list(range(37, 50))
    + list(range(55, 82))
    + list(range(87, 119))
)

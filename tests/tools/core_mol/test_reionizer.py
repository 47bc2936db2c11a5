import logging

import pytest
from rdkit import Chem

from molcharge.tools.core_mol.reionizer import Reionizer, ReionizeOutcome, SiteMatch


def _smi(mol):
    return Chem.MolToSmiles(mol)


def _frags(mol):
    return set(Chem.MolToSmiles(mol).split("."))


def test_reionize_sulfinic_sulfonic_acid():
    """The proton ends up on the weaker (sulfinic) acid."""
    mol = Chem.MolFromSmiles("C1=C(C=CC(=C1)[S]([O-])=O)[S](O)(=O)=O")
    result = Reionizer().reionize(mol)

    assert _smi(result) == "O=S(O)c1ccc(S(=O)(=O)[O-])cc1"
    assert Chem.GetFormalCharge(result) == -1


def test_reionize_phenolate_and_carboxylic_acid():
    mol = Chem.MolFromSmiles("[O-]c1ccccc1.CC(=O)O")
    outcome = Reionizer().reionize_in_place(mol)

    assert outcome is ReionizeOutcome.DONE
    assert _frags(mol) == {"Oc1ccccc1", "CC(=O)[O-]"}


def test_reionize_returns_copy():
    mol = Chem.MolFromSmiles("[O-]c1ccccc1.CC(=O)O")
    result = Reionizer().reionize(mol)

    assert result is not mol
    assert _frags(mol) == {"[O-]c1ccccc1", "CC(=O)O"}
    assert _frags(result) == {"Oc1ccccc1", "CC(=O)[O-]"}


def test_reionize_is_idempotent():
    reionizer = Reionizer()
    once = reionizer.reionize(Chem.MolFromSmiles("[O-]c1ccccc1.CC(=O)O"))
    twice = reionizer.reionize(once)

    assert _smi(once) == _smi(twice)


def test_reionize_keeps_correct_distribution():
    mol = Chem.MolFromSmiles("Oc1ccccc1.CC(=O)[O-]")
    assert _frags(Reionizer().reionize(mol)) == {"Oc1ccccc1", "CC(=O)[O-]"}


def test_reionize_neutral_molecule_unchanged():
    mol = Chem.MolFromSmiles("CC(=O)O")
    assert _smi(Reionizer().reionize(mol)) == "CC(=O)O"


# ============================================================================
# Charge corrections
# ============================================================================


@pytest.mark.parametrize("smiles, expected", [
    ("[Na]", "[Na+]"),
    ("[K+]", "[K+]"),
    ("[Mg]", "[Mg+2]"),
    ("[Cl]", "[Cl-]"),
    ("[Cl-]", "[Cl-]"),
])
def test_charge_corrections_on_free_ions(smiles, expected):
    result = Reionizer().reionize(Chem.MolFromSmiles(smiles))
    assert _smi(result) == expected


def test_correction_is_balanced_by_ionizing_strongest_acid():
    mol = Chem.MolFromSmiles("[Na].CC(=O)O")
    result = Reionizer().reionize(mol)

    assert _frags(result) == {"CC(=O)[O-]", "[Na+]"}
    assert Chem.GetFormalCharge(result) == 0


def test_empty_correction_table():
    result = Reionizer(corrections=[]).reionize(Chem.MolFromSmiles("[Na]"))
    assert _smi(result) == "[Na]"


def test_later_correction_wins_on_overlap():
    corrections = [("sodium cation", "[Na;X0+0]", 1), ("sodium anion", "[Na;X0]", -1)]
    result = Reionizer(corrections=corrections).reionize(Chem.MolFromSmiles("[Na]"))

    assert result.GetAtomWithIdx(0).GetFormalCharge() == -1


def test_apply_corrections_logs(caplog):
    caplog.set_level(logging.INFO, logger="molcharge")
    Reionizer().apply_corrections(Chem.MolFromSmiles("[Na]"))

    assert "Applying charge correction [Li,Na,K] Na 1" in caplog.text


# ============================================================================
# Site search
# ============================================================================


def test_strongest_protonated():
    reionizer = Reionizer()
    hit = reionizer.strongest_protonated(Chem.MolFromSmiles("CC(=O)O"))

    assert hit == SiteMatch(6, (1, 2, 3))
    assert hit.site == 3
    assert reionizer.catalog[hit.rank].name == "-CO2H"


def test_weakest_ionized():
    reionizer = Reionizer()
    assert reionizer.weakest_ionized(Chem.MolFromSmiles("CC(=O)O")) is None

    hit = reionizer.weakest_ionized(Chem.MolFromSmiles("CC(=O)[O-]"))
    assert hit.rank == 6
    assert hit.site == 3


def test_strongest_protonated_prefers_stronger_acid():
    hit = Reionizer().strongest_protonated(Chem.MolFromSmiles("Oc1ccc(CC(=O)O)cc1"))
    assert hit.rank == 6


def test_strongest_protonated_not_found():
    reionizer = Reionizer(acid_base_data=[("C(=O)[OH]", "C(=O)[O-]", "-CO2H")])
    assert reionizer.strongest_protonated(Chem.MolFromSmiles("c1ccccc1")) is None


# ============================================================================
# Aborts
# ============================================================================


def test_abort_when_acid_and_base_share_a_site(caplog):
    caplog.set_level(logging.INFO, logger="molcharge")
    reionizer = Reionizer(acid_base_data=[("[Na]", "[Li]", "p0"), ("[K]", "[Na]", "p1")], corrections=[])
    mol = Chem.MolFromSmiles("[Na+]")

    assert reionizer.reionize_in_place(mol) is ReionizeOutcome.ABORTED
    assert _smi(mol) == "[Na+]"
    assert "Aborted reionization due to unexpected situation" in caplog.text


def test_abort_on_ambiguous_proton_placement(caplog):
    caplog.set_level(logging.INFO, logger="molcharge")
    reionizer = Reionizer(acid_base_data=[("[OH]", "[Xe]", "p0"), ("[Xe]", "[O-]", "p1")])
    mol = Chem.MolFromSmiles("OCC[O-]")

    assert reionizer.reionize_in_place(mol) is ReionizeOutcome.ABORTED
    # the first transfer is kept
    assert mol.GetAtomWithIdx(0).GetFormalCharge() == -1
    assert mol.GetAtomWithIdx(3).GetFormalCharge() == 0
    assert Chem.GetFormalCharge(mol) == -1
    assert "Moved proton from p0 to p1" in caplog.text
    assert "ambiguous" in caplog.text


# ============================================================================
# Construction
# ============================================================================


def test_reionizers_share_catalog():
    assert Reionizer().catalog is Reionizer().catalog


def test_reionizer_from_file(tmp_path):
    path = tmp_path / "pairs.txt"
    path.write_text("-CO2H\tC(=O)[OH]\tC(=O)[O-]\nphenol\tc[OH]\tc[O-]\n")

    reionizer = Reionizer(acid_base_file=path)
    result = reionizer.reionize(Chem.MolFromSmiles("[O-]c1ccccc1.CC(=O)O"))

    assert len(reionizer.catalog) == 2
    assert _frags(result) == {"Oc1ccccc1", "CC(=O)[O-]"}


def test_reionizer_catalog_and_source_conflict():
    catalog = Reionizer().catalog
    with pytest.raises(ValueError):
        Reionizer(catalog=catalog, acid_base_data=[("C(=O)[OH]", "C(=O)[O-]", "-CO2H")])


def test_reionizer_repr():
    reionizer = Reionizer(corrections=[])
    assert repr(reionizer).startswith("Reionizer(catalog='file:")
    assert repr(reionizer).endswith("corrections=0)")

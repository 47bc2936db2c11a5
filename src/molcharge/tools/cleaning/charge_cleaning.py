from collections import Counter
from typing import Optional

from molcharge.infrastructure.logging import loggable
from molcharge.infrastructure.resources import _load_resource, _store_resource
from molcharge.tools.core_mol.reionizer import Reionizer
from molcharge.tools.core_mol.uncharger import Uncharger
from molcharge.tools.core_mol.smiles_ops import (
    _reionize_smiles,
    _uncharge_smiles,
    _standardize_charges_smiles,
    _charge_parent_smiles,
    _net_charge_smiles,
)


def _split_results(results: list[tuple]) -> tuple[list, list[str]]:
    return [smi for smi, _ in results], [cmt for _, cmt in results]


@loggable
def reionize_smiles(smiles: list[str], acid_base_file: Optional[str] = None) -> tuple[list[str], list[str]]:
    """
    Reionize molecules so charges sit on the strongest acids and weakest bases.

    Free Li/Na/K, Mg/Ca and Cl atoms get their ionic charge, then protons are
    moved from the strongest protonated acid to the weakest ionized base until
    no transfer improves the ionization state. Output is reionized AND
    canonicalized.

    Parameters
    ----------
    smiles : list[str]
        SMILES strings to process.
    acid_base_file : str, optional
        Custom acid/base pair table (name<TAB>acid SMARTS<TAB>base SMARTS per
        line). Defaults to the packaged table.

    Returns
    -------
    tuple[list[str], list[str]]
        (reionized_smiles, comments). Comments: "Passed", "Failed: <reason>",
        or "Passed, reionization aborted: ambiguous proton placement" when the
        proton placement was ambiguous (changes made up to that point are kept).

    Examples
    --------
    smiles = ["C1=C(C=CC(=C1)[S]([O-])=O)[S](O)(=O)=O"]
    reionized, comments = reionize_smiles(smiles)
    # Returns: ["O=S(O)c1ccc(S(=O)(=O)[O-])cc1"], ["Passed"]
    """
    reionizer = Reionizer(acid_base_file=acid_base_file)
    return _split_results([_reionize_smiles(smi, reionizer) for smi in smiles])


@loggable
def uncharge_smiles(smiles: list[str], force: bool = False, canonical_ordering: bool = True) -> tuple[list[str], list[str]]:
    """
    Neutralize molecules by adding/removing hydrogens. Output is uncharged AND canonicalized.

    Charges that cannot be removed by moving a hydrogen (e.g. quaternary
    ammonium) are kept, together with as many anions as are needed to balance
    them, unless `force` is True.

    Parameters
    ----------
    smiles : list[str]
        SMILES strings to process.
    force : bool
        Neutralize every removable negative charge, even if a net charge remains.
    canonical_ordering : bool
        Choose between equivalent anions by canonical atom rank, making the
        result independent of input atom order.

    Returns
    -------
    tuple[list[str], list[str]]
        (uncharged_smiles, comments). Comments: "Passed" or "Failed: <reason>".

    Examples
    --------
    smiles = ["CC(=O)[O-]", "[NH3+]CC(=O)[O-]", "C[N+](C)(C)CC(=O)[O-]"]
    uncharged, comments = uncharge_smiles(smiles)
    # Returns: ["CC(=O)O", "NCC(=O)O", "C[N+](C)(C)CC(=O)[O-]"]
    """
    uncharger = Uncharger(force=force, canonical_ordering=canonical_ordering)
    return _split_results([_uncharge_smiles(smi, uncharger) for smi in smiles])


@loggable
def standardize_charges(smiles: list[str], force: bool = False, canonical_ordering: bool = True,
                        acid_base_file: Optional[str] = None) -> tuple[list[str], list[str]]:
    """Reionize and then uncharge molecules. Output is canonicalized.

    Parameters
    ----------
    smiles : list[str]
        SMILES strings to process.
    force : bool
        Passed to the uncharging step.
    canonical_ordering : bool
        Passed to the uncharging step.
    acid_base_file : str, optional
        Custom acid/base pair table for the reionization step.

    Returns
    -------
    tuple[list[str], list[str]]
        (standardized_smiles, comments).
    """
    reionizer = Reionizer(acid_base_file=acid_base_file)
    uncharger = Uncharger(force=force, canonical_ordering=canonical_ordering)
    return _split_results([_standardize_charges_smiles(smi, reionizer, uncharger) for smi in smiles])


@loggable
def charge_parent_smiles(smiles: list[str], force: bool = False, canonical_ordering: bool = True,
                         acid_base_file: Optional[str] = None) -> tuple[list[str], list[str]]:
    """Keep the largest fragment of each molecule, then reionize and uncharge it.

    Parameters
    ----------
    smiles : list[str]
        SMILES strings to process. Counterions and solvents are dropped.
    force : bool
        Passed to the uncharging step.
    canonical_ordering : bool
        Passed to the uncharging step.
    acid_base_file : str, optional
        Custom acid/base pair table for the reionization step.

    Returns
    -------
    tuple[list[str], list[str]]
        (parent_smiles, comments). Comments: "Passed" or "Failed: <reason>".
    """
    reionizer = Reionizer(acid_base_file=acid_base_file)
    uncharger = Uncharger(force=force, canonical_ordering=canonical_ordering)
    return _split_results([_charge_parent_smiles(smi, reionizer, uncharger) for smi in smiles])


@loggable
def net_charge_smiles(smiles: list[str]) -> tuple[list[int], list[str]]:
    """Net formal charge of each molecule.

    Useful to check which molecules stay charged after uncharging.

    Returns
    -------
    tuple[list[int], list[str]]
        (net_charges, comments). Invalid SMILES give None and "Failed: Invalid SMILES string".

    Examples
    --------
    net_charge_smiles(["CC(=O)[O-]", "[NH3+]CC(=O)[O-]"])
    # Returns: [-1, 0], ["Passed", "Passed"]
    """
    return _split_results([_net_charge_smiles(smi) for smi in smiles])


def _apply_to_dataset(input_filename, column_name, project_manifest_path, step: str, func, **kwargs) -> tuple:
    df = _load_resource(project_manifest_path, input_filename)

    if column_name not in df.columns:
        raise ValueError(f"Column {column_name} not found in dataset.")

    new_smiles, comments = func(df[column_name].tolist(), **kwargs)
    df[f'smiles_after_{step}'] = new_smiles
    df[f'comments_after_{step}'] = comments

    return df, comments


@loggable
def reionize_smiles_dataset(
    input_filename: str,
    column_name: str,
    project_manifest_path: str,
    output_filename: str,
    explanation: str = "Reionize molecules to preferred charge distribution",
    acid_base_file: Optional[str] = None
) -> dict:
    """Reionize molecules (zwitterions, multi-ionizable compounds) in a dataset column.

    Args:
        input_filename: Stored dataset filename (e.g., 'dataset_raw_csv_A3F2B1D4.csv')
        column_name: Column with SMILES to reionize
        project_manifest_path: Path to the project manifest file for tracking this resource
        output_filename: Base filename for the stored resource (without extension)
        explanation: Brief description of the reionization performed
        acid_base_file: Optional custom acid/base pair table

    Returns:
        dict with output_filename, n_rows, columns, comments (counts), preview, note, warning, suggestions

    Adds columns: smiles_after_reionization, comments_after_reionization
    """
    df, comments = _apply_to_dataset(input_filename, column_name, project_manifest_path, 'reionization',
                                     reionize_smiles.__wrapped__, acid_base_file=acid_base_file)
    stored = _store_resource(df, project_manifest_path, output_filename, explanation, 'csv')

    return {
        "output_filename": stored,
        "n_rows": len(df),
        "columns": list(df.columns),
        "comments": dict(Counter(comments)),
        "preview": df.head(5).to_dict(orient="records"),
        "note": "Successful reionization is marked by 'Passed' in comments. Protons have been moved from the strongest acids to the weakest bases. The output SMILES are canonical and isomeric.",
        "warning": "Reionization works from a fixed table of acid strengths and does not model pH. Rows marked 'reionization aborted' had an ambiguous proton placement and were only partly rebalanced.",
        "suggestions": "Review failed and aborted rows. Consider uncharge_smiles_dataset next if neutral structures are wanted.",
    }


@loggable
def uncharge_smiles_dataset(
    input_filename: str,
    column_name: str,
    project_manifest_path: str,
    output_filename: str,
    explanation: str = "Neutralize charges in molecules",
    force: bool = False,
    canonical_ordering: bool = True
) -> dict:
    """Neutralize removable charges in a dataset column.

    Parameters
    ----------
    input_filename : str
        Stored dataset filename.
    column_name : str
        Column with SMILES to process.
    project_manifest_path : str
        Path to project manifest.
    output_filename : str
        Output filename (without extension).
    explanation : str
        Description of operation.
    force : bool
        Neutralize every removable negative charge, even if a net charge remains.
    canonical_ordering : bool
        Choose between equivalent anions by canonical atom rank.

    Returns
    -------
    dict
        output_filename, n_rows, columns, comments, preview, note, warning, suggestions.
        Adds columns: smiles_after_uncharging, comments_after_uncharging.
    """
    df, comments = _apply_to_dataset(input_filename, column_name, project_manifest_path, 'uncharging',
                                     uncharge_smiles.__wrapped__, force=force, canonical_ordering=canonical_ordering)
    stored = _store_resource(df, project_manifest_path, output_filename, explanation, 'csv')

    return {
        "output_filename": stored,
        "n_rows": len(df),
        "columns": list(df.columns),
        "comments": dict(Counter(comments)),
        "preview": df.head(5).to_dict(orient="records"),
        "note": "Successful uncharging is marked by 'Passed' in comments. The output SMILES are canonical and isomeric.",
        "warning": "Quaternary cations and the anions balancing them are kept charged unless force=True. Zwitterions with hydrogen-bearing cations are fully neutralized.",
        "suggestions": "Run reionize_smiles_dataset first for multi-ionizable compounds. Review failed rows.",
    }


@loggable
def standardize_charges_dataset(
    input_filename: str,
    column_name: str,
    project_manifest_path: str,
    output_filename: str,
    explanation: str = "Reionize and neutralize molecules",
    force: bool = False,
    canonical_ordering: bool = True,
    acid_base_file: Optional[str] = None
) -> dict:
    """Reionize and then uncharge the SMILES in a dataset column.

    Adds columns: smiles_after_charge_standardization, comments_after_charge_standardization
    """
    df, comments = _apply_to_dataset(input_filename, column_name, project_manifest_path, 'charge_standardization',
                                     standardize_charges.__wrapped__, force=force, canonical_ordering=canonical_ordering,
                                     acid_base_file=acid_base_file)
    stored = _store_resource(df, project_manifest_path, output_filename, explanation, 'csv')

    return {
        "output_filename": stored,
        "n_rows": len(df),
        "columns": list(df.columns),
        "comments": dict(Counter(comments)),
        "preview": df.head(5).to_dict(orient="records"),
        "note": "Successful charge standardization is marked by 'Passed' in comments. The output SMILES are canonical and isomeric.",
        "warning": "Quaternary cations and the anions balancing them stay charged unless force=True. Rows marked 'reionization aborted' were only partly rebalanced before uncharging.",
        "suggestions": "Review failed rows and rows where reionization was aborted.",
    }


@loggable
def charge_parent_smiles_dataset(
    input_filename: str,
    column_name: str,
    project_manifest_path: str,
    output_filename: str,
    explanation: str = "Compute charge parents (largest fragment, reionized and neutralized)",
    force: bool = False,
    canonical_ordering: bool = True,
    acid_base_file: Optional[str] = None
) -> dict:
    """Replace each molecule in a dataset column by its charge parent.

    Adds columns: smiles_after_charge_parent, comments_after_charge_parent
    """
    df, comments = _apply_to_dataset(input_filename, column_name, project_manifest_path, 'charge_parent',
                                     charge_parent_smiles.__wrapped__, force=force, canonical_ordering=canonical_ordering,
                                     acid_base_file=acid_base_file)
    stored = _store_resource(df, project_manifest_path, output_filename, explanation, 'csv')

    return {
        "output_filename": stored,
        "n_rows": len(df),
        "columns": list(df.columns),
        "comments": dict(Counter(comments)),
        "preview": df.head(5).to_dict(orient="records"),
        "note": "Successful charge parent computation is marked by 'Passed' in comments. Counterions and smaller fragments have been dropped.",
        "warning": "Only the largest fragment is kept; mixtures lose their minor components.",
        "suggestions": "Review failed rows. Deduplicate on the charge parent column to merge salt forms of the same compound.",
    }


def get_all_charge_tools():
    """Return a list of all charge standardization tools exposed to MCP server."""
    return [
        # SMILES-level functions
        reionize_smiles,
        uncharge_smiles,
        standardize_charges,
        charge_parent_smiles,
        net_charge_smiles,

        # Dataset-level functions
        reionize_smiles_dataset,
        uncharge_smiles_dataset,
        standardize_charges_dataset,
        charge_parent_smiles_dataset,
    ]

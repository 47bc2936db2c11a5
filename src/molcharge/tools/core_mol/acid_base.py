"""
Charge correction table and acid/base pair catalog.

An acid/base catalog is an ordered table of conjugate pairs, strongest acid
first. The position of a pair in the table is its acid-strength rank and is
what the Reionizer compares when it decides whether moving a proton is an
improvement.

Catalogs are built once per distinct source and shared read-only:

    >>> catalog = load_acid_base_catalog()                    # packaged table
    >>> catalog = load_acid_base_catalog(path="pairs.txt")    # custom file
    >>> catalog = load_acid_base_catalog(data=[("C(=O)[OH]", "C(=O)[O-]", "-CO2H")])

Text format, one pair per line (blank lines and `//` comments are ignored):

    name<TAB>acid SMARTS<TAB>base SMARTS
"""

import hashlib
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Iterable, Iterator, Optional, Sequence, Union

from rdkit.Chem.rdchem import Mol

from molcharge.config import ACID_BASE_FILE
from molcharge.constants import CHARGE_CORRECTIONS
from molcharge.tools.core_mol.atom_ops import compile_smarts


class AcidBaseCatalogError(ValueError):
    """Raised when an acid/base catalog source cannot be parsed."""


@dataclass(frozen=True)
class ChargeCorrection:
    """A free ion whose formal charge is always forced to `charge`."""
    name: str
    smarts: str
    charge: int
    pattern: Mol = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "pattern", compile_smarts(self.smarts))


@dataclass(frozen=True)
class AcidBasePair:
    name: str
    acid_smarts: str
    base_smarts: str
    acid: Mol = field(init=False, repr=False, compare=False)
    base: Mol = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "acid", compile_smarts(self.acid_smarts))
        object.__setattr__(self, "base", compile_smarts(self.base_smarts))


@dataclass(frozen=True)
class AcidBaseCatalog:
    pairs: tuple
    source: str

    def __len__(self) -> int:
        return len(self.pairs)

    def __iter__(self) -> Iterator[AcidBasePair]:
        return iter(self.pairs)

    def __getitem__(self, rank: int) -> AcidBasePair:
        return self.pairs[rank]


def make_charge_corrections(corrections: Optional[Iterable] = None) -> tuple:
    """ Build a correction table from ChargeCorrection objects or (name, smarts, charge) triples. Defaults to CHARGE_CORRECTIONS. """
    if corrections is None:
        corrections = CHARGE_CORRECTIONS
    table = []
    for cc in corrections:
        if isinstance(cc, ChargeCorrection):
            table.append(cc)
        else:
            name, smarts, charge = cc
            table.append(ChargeCorrection(name, smarts, int(charge)))
    return tuple(table)


def read_acid_base_pairs(text: str) -> tuple:
    """ Parse catalog text into an ordered tuple of AcidBasePair (strongest acid first). """
    pairs = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("//"):
            continue
        fields = [f.strip() for f in line.split("\t") if f.strip()]
        if len(fields) != 3:
            raise AcidBaseCatalogError(
                f"Line {lineno}: expected 'name<TAB>acid<TAB>base', got {len(fields)} field(s): {raw!r}")
        name, acid, base = fields
        try:
            pairs.append(AcidBasePair(name, acid, base))
        except ValueError as e:
            raise AcidBaseCatalogError(f"Line {lineno}: {e}") from e
    if not pairs:
        raise AcidBaseCatalogError("Acid/base catalog contains no pairs")
    return tuple(pairs)


def _pairs_from_data(data: Sequence[Sequence[str]]) -> tuple:
    pairs = []
    for i, triple in enumerate(data):
        if len(triple) != 3:
            raise AcidBaseCatalogError(f"Entry {i}: expected (acid, base, name), got {triple!r}")
        acid, base, name = triple
        try:
            pairs.append(AcidBasePair(name, acid, base))
        except ValueError as e:
            raise AcidBaseCatalogError(f"Entry {i}: {e}") from e
    if not pairs:
        raise AcidBaseCatalogError("Acid/base catalog contains no pairs")
    return tuple(pairs)


# Catalogs keyed by normalized source identity; each source is built at most once.
_CATALOG_CACHE: dict = {}
_CATALOG_LOCK = threading.Lock()


def _cached_catalog(key: tuple, source: str, build) -> AcidBaseCatalog:
    with _CATALOG_LOCK:
        catalog = _CATALOG_CACHE.get(key)
        if catalog is None:
            catalog = AcidBaseCatalog(pairs=build(), source=source)
            _CATALOG_CACHE[key] = catalog
        return catalog


def clear_catalog_cache() -> None:
    with _CATALOG_LOCK:
        _CATALOG_CACHE.clear()


def load_acid_base_catalog(
    path: Optional[Union[str, Path]] = None,
    data: Optional[Sequence[Sequence[str]]] = None,
    stream: Optional[IO] = None,
) -> AcidBaseCatalog:
    """
    Return the shared acid/base catalog for a source.

    Parameters
    ----------
    path : str or Path, optional
        Catalog text file. Keyed by its resolved path.
    data : sequence of (acid SMARTS, base SMARTS, name), optional
        Inline pairs, strongest acid first. Keyed by content.
    stream : file-like, optional
        Readable text (or bytes) stream in the file format. Keyed by a SHA-256
        of its content.

    With no source, the packaged table (or MOLCHARGE_ACID_BASE_FILE) is used.

    Raises
    ------
    ValueError
        If more than one source is given.
    AcidBaseCatalogError
        If the source is malformed or contains an invalid SMARTS.
    FileNotFoundError
        If `path` does not exist.
    """
    given = [s is not None for s in (path, data, stream)]
    if sum(given) > 1:
        raise ValueError("Give at most one of path, data or stream")

    if data is not None:
        triples = tuple(tuple(t) for t in data)
        key = ("data", triples)
        return _cached_catalog(key, f"data:{len(triples)} pairs", lambda: _pairs_from_data(triples))

    if stream is not None:
        text = stream.read()
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        key = ("text", hashlib.sha256(text.encode("utf-8")).hexdigest())
        return _cached_catalog(key, f"text:{key[1]}", lambda: read_acid_base_pairs(text))

    file_path = Path(path if path is not None else ACID_BASE_FILE).expanduser().resolve()
    if not file_path.exists():
        raise FileNotFoundError(f"Acid/base catalog not found: {file_path}")
    key = ("file", str(file_path))
    return _cached_catalog(key, f"file:{file_path}", lambda: read_acid_base_pairs(file_path.read_text(encoding="utf-8")))

from datetime import datetime
import inspect
from functools import wraps
from molcharge.config import LOG_PATH


def _fmt(val):
    """Compact representation to avoid huge log lines."""
    try:
        # Molecules are logged by their SMILES
        if hasattr(val, "GetNumAtoms"):
            from rdkit.Chem import MolToSmiles
            return f"<Mol {MolToSmiles(val)}>"

        if isinstance(val, str):
            if len(val) > 100:
                return val[:97] + "..."
            return val

        # DataFrames and arrays
        if hasattr(val, "shape"):
            return f"<Array-like shape={val.shape}>"

        if isinstance(val, (list, dict, tuple, set)) and len(val) > 30:
            return f"<{type(val).__name__} len={len(val)}>"
        return repr(val)
    except Exception:
        return "<unprintable>"


def loggable(func):
    """
    Decorator that appends an operation-history entry to `LOG_PATH`:
      - function name
      - first line of docstring
      - inputs as passed in (captured before the call mutates anything)
      - return value
      - execution time
    """
    sig = inspect.signature(func)
    doc = inspect.getdoc(func)
    docstring_first_line = doc.strip().split("\n")[0] if doc else "Description not available."

    @wraps(func)
    def wrapper(*args, **kwargs):
        bound = sig.bind(*args, **kwargs)
        bound.apply_defaults()
        inputs_str = {k: _fmt(v) for k, v in bound.arguments.items()}

        start_time = datetime.now()
        result = func(*args, **kwargs)
        elapsed_time = (datetime.now() - start_time).total_seconds()

        if isinstance(result, dict):
            outputs_str = {k: _fmt(v) for k, v in result.items()}
        else:
            outputs_str = _fmt(result)

        entry = (
            datetime.now().strftime("\n%Y-%m-%d %H:%M:%S:\n")
            + f"\tFunction: {func.__name__}()\n"
            + f"\tDescription: {docstring_first_line}\n"
            + f"\tInputs: {inputs_str}\n"
            + f"\tOutputs: {outputs_str}\n"
            + f"\tExecution Time: {elapsed_time:.4f}s\n"
        )

        with LOG_PATH.open("a", encoding="utf-8") as f:
            f.write(entry)

        return result

    return wrapper

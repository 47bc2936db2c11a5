import os
from pathlib import Path


# You can set your custom data directory by running (change path to desired location): export MOLCHARGE_DATA_DIR="~/user/molcharge_data"
# If not set, defaults to ~/.molcharge/

def get_data_root() -> Path:
    # Allow user to override via environment variable
    custom = os.getenv("MOLCHARGE_DATA_DIR")
    if custom:
        root = Path(custom).expanduser()
    else:
        # Default: ~/.molcharge/
        root = Path.home() / ".molcharge"

    root.mkdir(parents=True, exist_ok=True)
    return root


def get_acid_base_file() -> Path:
    # A custom acid/base pair table can replace the packaged one: export MOLCHARGE_ACID_BASE_FILE="~/pairs.txt"
    custom = os.getenv("MOLCHARGE_ACID_BASE_FILE")
    if custom:
        return Path(custom).expanduser()
    return Path(__file__).parent / "data" / "acid_base_pairs.txt"


DATA_ROOT = get_data_root()
LOG_PATH = DATA_ROOT / "history.log"
ACID_BASE_FILE = get_acid_base_file()

from pathlib import Path
import os

import dotenv

dotenv.load_dotenv()

# --------------------------------------------------- locations
PALLETS_DIR_NAME = "pallets"
TYPES_FILE_NAME  = "types.json"

# --------------------------------------------------- pallets, in merge order (last one wins)
PALLETS = (
    "faucets",
    "permissions",
    "post-history",
    "posts",
    "profile-follows",
    "profile-history",
    "profiles",
    "reactions",
    "roles",
    "space-follows",
    "space-history",
    "space-ownership",
    "spaces",
    "utils",
)

# Types native to the runtime itself (lib.rs), see
# https://polkadot.js.org/api/start/types.extend.html#impact-on-extrinsics
RUNTIME_TYPE_OVERRIDES = {}

BUILTIN_TYPES = {
    "IpfsCid": "Text",
}


def default_root() -> Path:
    """$TYPES_ROOT if set, otherwise the repo root this package lives in."""
    env_root = os.getenv("TYPES_ROOT")
    if env_root:
        return Path(env_root).expanduser()
    return Path(__file__).resolve().parents[1]

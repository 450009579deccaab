"""
Data files shipped with thrtools.
"""

from thrtools.util.io import read_yaml

import os

DATA_DIR = os.path.dirname(os.path.abspath(__file__))

LEGACY_STRAIN_FILE = os.path.join(DATA_DIR, "legacy_strains.yaml")

# Keys every legacy-strain translation configuration must define
LEGACY_STRAIN_KEYS = ["host_map",
                      "plasmid_map",
                      "plasmid_default",
                      "plasmid_free_host",
                      "plasmid_free_loc",
                      "protein_errors",
                      "bad_deletes"]

def load_legacy_strain_config(cf=None):
    """
    Load the tables used to translate legacy strain labels.

    Parameters
    ----------
    cf : str or dict, optional
        a YAML file or already-loaded dictionary. If None, the packaged
        legacy_strains.yaml is used.

    Returns
    -------
    dict
        the validated configuration. Host numbers and plasmid codes are keyed
        as strings, and bad_deletes is a set.

    Raises
    ------
    ValueError
        if a required key is missing or a plasmid entry does not have four
        fields.
    """

    if cf is None:
        cf = LEGACY_STRAIN_FILE

    config = read_yaml(cf)

    missing = [k for k in LEGACY_STRAIN_KEYS if k not in config]
    if missing:
        raise ValueError(f"Legacy strain configuration is missing keys: {missing}")

    config["host_map"] = {str(k): str(v) for k, v in config["host_map"].items()}
    config["protein_errors"] = {str(k): str(v)
                                for k, v in config["protein_errors"].items()}
    config["bad_deletes"] = set(str(b) for b in config["bad_deletes"])
    config["plasmid_free_host"] = str(config["plasmid_free_host"])
    config["plasmid_free_loc"] = str(config["plasmid_free_loc"])

    plasmid_map = {}
    for k, v in config["plasmid_map"].items():
        if len(v) != 4:
            raise ValueError(f"Plasmid '{k}' must map to four sample ID fields, not {v}")
        plasmid_map[str(k)] = [str(x) for x in v]
    config["plasmid_map"] = plasmid_map

    if len(config["plasmid_default"]) != 4:
        raise ValueError("plasmid_default must have four sample ID fields.")
    config["plasmid_default"] = [str(x) for x in config["plasmid_default"]]

    return config

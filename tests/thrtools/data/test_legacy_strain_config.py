import pytest

from thrtools.data import (
    load_legacy_strain_config,
    LEGACY_STRAIN_FILE,
    LEGACY_STRAIN_KEYS,
)

import os


def test_packaged_config():

    assert os.path.isfile(LEGACY_STRAIN_FILE)

    config = load_legacy_strain_config()
    for k in LEGACY_STRAIN_KEYS:
        assert k in config

    assert config["host_map"]["277"] == "7"
    assert config["host_map"]["926"] == "M"
    assert config["plasmid_map"]["pfb6.4.2"] == ["D", "TasdA1", "P", "asdD"]
    assert config["plasmid_default"] == ["0", "0", "0", "asdO"]
    assert config["plasmid_free_host"] == "277"
    assert config["protein_errors"]["rthA"] == "rhtA"
    assert config["bad_deletes"] == {"asd", "thrABC"}


def test_config_from_dict():

    config = load_legacy_strain_config({"host_map": {277: 7},
                                        "plasmid_map": {},
                                        "plasmid_default": [0, 0, 0, "asdO"],
                                        "plasmid_free_host": 277,
                                        "plasmid_free_loc": "A",
                                        "protein_errors": {},
                                        "bad_deletes": ["asd"]})

    # keys and values come back as strings
    assert config["host_map"] == {"277": "7"}
    assert config["plasmid_default"] == ["0", "0", "0", "asdO"]
    assert config["plasmid_free_host"] == "277"
    assert config["bad_deletes"] == {"asd"}


def test_config_missing_key(tmp_path):

    f = tmp_path / "strains.yaml"
    f.write_text("host_map:\n  '277': '7'\n")

    with pytest.raises(ValueError, match="missing keys"):
        load_legacy_strain_config(str(f))


def test_config_bad_plasmid():

    config = load_legacy_strain_config(LEGACY_STRAIN_FILE)
    config["plasmid_map"] = {"pbad": ["D", "T"]}

    with pytest.raises(ValueError, match="pbad"):
        load_legacy_strain_config(config)

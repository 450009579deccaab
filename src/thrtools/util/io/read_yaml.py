import yaml
import re

# Strings pyyaml leaves alone but we want as numbers (1e-3, 2E5, ...)
_SCI_NOTATION = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)$')

def _normalize_types(node):
    """
    Recursively convert scientific-notation strings to floats. Dictionary keys
    are left as they are; they are labels, not values.
    """

    if isinstance(node, dict):
        return {k: _normalize_types(v) for k, v in node.items()}
    if isinstance(node, list):
        return [_normalize_types(elem) for elem in node]
    if isinstance(node, str) and _SCI_NOTATION.match(node):
        return float(node)

    return node


def read_yaml(cf):
    """
    Load a YAML configuration file.

    Parameters
    ----------
    cf : str or dict
        If a string, the path to the YAML file. If a dict, it is assumed to be
        an already-loaded configuration and a shallow copy is returned.

    Returns
    -------
    config : dict
        the configuration.

    Raises
    ------
    FileNotFoundError
        if the file does not exist.
    ValueError
        if the file cannot be parsed or does not hold a mapping.
    """

    if isinstance(cf, dict):
        config = dict(cf)
    else:
        try:
            with open(cf, 'r') as f:
                config = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise FileNotFoundError(f"Configuration file not found at '{cf}'") from e
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing YAML file '{cf}': {e}") from e

        if not isinstance(config, dict):
            raise ValueError(f"Configuration file '{cf}' does not contain a mapping.")

        config = _normalize_types(config)

    return config

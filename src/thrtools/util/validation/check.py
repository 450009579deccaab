import numpy as np
from typing import Any, Callable, Optional, TypeVar

_Numeric = TypeVar("_Numeric", int, float)

# Cell values read as TRUE by parse_flag. Anything else non-blank is FALSE.
TRUE_FLAGS = {"y", "yes", "t", "true", "1", "x", "+"}

def check_number(
    value: Any,
    param_name: Optional[str] = None,
    cast_type: Callable[[Any], _Numeric] = float,
    min_allowed: Optional[_Numeric] = None,
    max_allowed: Optional[_Numeric] = None,
    inclusive_min: bool = True,
    inclusive_max: bool = True,
    allow_none: bool = False,
) -> Optional[_Numeric]:
    """
    Validate and cast a scalar numerical value.

    Parameters
    ----------
    value : Any
        The value to validate.
    param_name : str, optional
        The name of the parameter being checked, used in error messages.
    cast_type : Callable, default: float
        A function to cast the value to (e.g., `int`, `float`).
    min_allowed, max_allowed : int or float, optional
        Bounds on the cast value. None means unbounded.
    inclusive_min, inclusive_max : bool, default: True
        Whether the bounds themselves are allowed.
    allow_none : bool, default: False
        If True, None is returned unchanged instead of raising.

    Returns
    -------
    _Numeric or None
        The cast and validated value.

    Raises
    ------
    ValueError
        If the value is None (and not `allow_none`), is not a scalar, fails to
        cast, is NaN, or falls outside the allowed range.
    """

    if value is None:
        if allow_none:
            return None
        raise ValueError(f'{param_name} cannot be None')

    try:
        if not np.isscalar(value):
            raise TypeError("Value must be a scalar.")

        v_cast = cast_type(value)
        if v_cast != v_cast:
            raise ValueError("Value must not be NaN.")

        if min_allowed is not None:
            if inclusive_min and v_cast < min_allowed:
                raise ValueError(f"Value must be >= {min_allowed}.")
            if not inclusive_min and v_cast <= min_allowed:
                raise ValueError(f"Value must be > {min_allowed}.")
        if max_allowed is not None:
            if inclusive_max and v_cast > max_allowed:
                raise ValueError(f"Value must be <= {max_allowed}.")
            if not inclusive_max and v_cast >= max_allowed:
                raise ValueError(f"Value must be < {max_allowed}.")

    except (ValueError, TypeError) as e:
        raise ValueError(
            f"Could not process parameter '{param_name}' with value '{value}'.\n"
            f"Reason: {e}"
        ) from e

    return v_cast


def check_cutoffs(cutoffs, param_name="scores"):
    """
    Parse and validate a list of production cutoffs.

    Parameters
    ----------
    cutoffs : str or iterable of float
        a comma-delimited string (as given on the command line) or a list of
        numbers.
    param_name : str, default "scores"
        name used in error messages.

    Returns
    -------
    list of float
        the cutoffs, in the order given.

    Raises
    ------
    ValueError
        if the list is empty, a value is not a positive number, or the values
        are not strictly increasing.
    """

    if isinstance(cutoffs, str):
        cutoffs = [c.strip() for c in cutoffs.split(",") if c.strip() != ""]

    values = [check_number(c,
                           param_name=param_name,
                           min_allowed=0,
                           inclusive_min=False) for c in cutoffs]
    if len(values) == 0:
        raise ValueError(f"'{param_name}' must contain at least one cutoff.")

    for prev, curr in zip(values[:-1], values[1:]):
        if curr <= prev:
            raise ValueError(
                f"'{param_name}' must be strictly increasing; {curr} follows {prev}."
            )

    return values


def parse_flag(value):
    """
    Interpret a spreadsheet flag cell ("Y", "yes", "1", "TRUE", ...).

    Blank cells and anything not recognized as true are False.
    """

    if value is None:
        return False
    return str(value).strip().lower() in TRUE_FLAGS


def parse_float(value):
    """
    Convert a table cell to a float. Blank cells become NaN.

    Raises
    ------
    ValueError
        if the cell is not blank and not numeric.
    """

    if value is None:
        return np.nan
    text = str(value).strip()
    if text == "":
        return np.nan
    try:
        return float(text)
    except ValueError as e:
        raise ValueError(f"Could not convert table value '{value}' to a number.") from e

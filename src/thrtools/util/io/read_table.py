import pandas as pd

from thrtools.util.dataframe import check_columns

import csv
import os
from pathlib import Path
from typing import Iterable, Optional, Union

def read_table(source: Union[str, Path, pd.DataFrame],
               required_columns: Optional[Iterable[str]] = None,
               header: Union[int, None] = 0) -> pd.DataFrame:
    """
    Read a tab-delimited table into a DataFrame of strings.

    Every cell is read as text and empty cells stay empty strings, so callers
    decide themselves which fields are numeric and what a blank means. Columns
    are located by name, never by position, so a reordered file is fine but
    a renamed column is not.

    Parameters
    ----------
    source : str, Path or pandas.DataFrame
        path to a tab-delimited file with a header row, or a DataFrame (a
        string-typed copy is returned).
    required_columns : iterable of str, optional
        columns that must be present. A MissingColumnError naming every absent
        column is raised otherwise.
    header : int or None, default 0
        passed to pandas. Use None for headerless files.

    Returns
    -------
    pandas.DataFrame
        the table, with all values as str.

    Raises
    ------
    FileNotFoundError
        if the path does not exist.
    IOError
        if the file exists but cannot be parsed.
    TypeError
        if `source` is not a path or DataFrame.
    """

    if isinstance(source, (str, Path)):
        path = str(source)
        if not os.path.isfile(path):
            raise FileNotFoundError(f"Table file '{path}' is not found or unreadable.")
        try:
            df = pd.read_csv(path,
                             sep="\t",
                             header=header,
                             dtype=str,
                             keep_default_na=False,
                             quoting=csv.QUOTE_NONE)
        except Exception as e:
            raise IOError(f"Error reading table {path}: {e}") from e

    elif isinstance(source, pd.DataFrame):
        df = source.copy()
        df = df.astype(str)
    else:
        raise TypeError("`source` must be a file path (str) or pandas DataFrame.")

    # Header cells sometimes carry stray whitespace from spreadsheet exports
    if header is not None:
        df.columns = [str(c).strip() for c in df.columns]

    if required_columns is not None:
        check_columns(df, required_columns)

    return df


class MissingColumnError(ValueError):
    """
    Raised when a table lacks one or more columns that are located by name.
    """

    def __init__(self, missing):
        self.missing = sorted(missing)
        err = "Not all required columns seen. Missing columns:\n"
        for c in self.missing:
            err += f"    {c}\n"
        super().__init__(err)


def check_columns(df, required_columns):
    """
    Check if a DataFrame contains all required columns.

    Parameters
    ----------
    df : pandas.DataFrame
        The DataFrame to check.
    required_columns : list of str
        A list of column names that are required to be present in the DataFrame.

    Raises
    ------
    MissingColumnError
        If any of the required columns are not found in the DataFrame. The
        message lists every missing column.
    """

    missing = set(required_columns) - set(df.columns)
    if missing:
        raise MissingColumnError(missing)

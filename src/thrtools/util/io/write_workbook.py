import pandas as pd
from openpyxl.utils import get_column_letter

import os
import warnings

# Excel refuses sheet names longer than this
MAX_SHEET_NAME = 31

def _autosize_columns(worksheet, df, min_width=6, max_width=60):
    """
    Set each column width from the longest header or cell text.
    """

    for i, column in enumerate(df.columns):
        lengths = [len(str(column))]
        lengths.extend(len(str(v)) for v in df[column] if not pd.isna(v))
        width = min(max(max(lengths) + 2, min_width), max_width)
        worksheet.column_dimensions[get_column_letter(i + 1)].width = width


def _apply_precision(worksheet, df, precision):
    """
    Give float cells a fixed number of decimal places.
    """

    number_format = "0." + "0" * precision if precision > 0 else "0"
    for i, column in enumerate(df.columns):
        if not pd.api.types.is_float_dtype(df[column]):
            continue
        for row in worksheet.iter_rows(min_row=2,
                                       max_row=len(df) + 1,
                                       min_col=i + 1,
                                       max_col=i + 1):
            for cell in row:
                cell.number_format = number_format


def write_workbook(sheets, out_file, precision=4):
    """
    Write a dictionary of DataFrames to an Excel workbook, one sheet each.

    Sheets are written in dictionary order. NaN cells are left blank, float
    columns are shown with `precision` decimals, and column widths are fitted
    to their contents.

    Parameters
    ----------
    sheets : dict
        dictionary keying sheet names to pandas DataFrames.
    out_file : str
        path of the .xlsx file to create.
    precision : int, default 4
        number of decimal places displayed for float columns.

    Raises
    ------
    FileNotFoundError
        if the output directory does not exist.
    ValueError
        if two sheet names collide after truncation to the Excel limit.
    """

    out_dir = os.path.dirname(os.path.abspath(out_file))
    if not os.path.isdir(out_dir):
        raise FileNotFoundError(f"Output directory '{out_dir}' does not exist.")

    seen = set()
    with pd.ExcelWriter(out_file, engine="openpyxl") as writer:
        for name, df in sheets.items():

            sheet_name = name
            if len(sheet_name) > MAX_SHEET_NAME:
                sheet_name = sheet_name[:MAX_SHEET_NAME]
                warnings.warn(f"Sheet name '{name}' truncated to '{sheet_name}'")
            if sheet_name in seen:
                raise ValueError(f"Duplicate sheet name '{sheet_name}' in workbook.")
            seen.add(sheet_name)

            df.to_excel(writer, sheet_name=sheet_name, index=False)
            worksheet = writer.sheets[sheet_name]
            _apply_precision(worksheet, df, precision)
            _autosize_columns(worksheet, df)

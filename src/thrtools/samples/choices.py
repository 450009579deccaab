"""
Choice sets: the distinct values seen in each strain field of a group of
sample IDs. They are written to a "choices" file with one line per field
(the five base fragments, then inserted genes, then deleted genes), each line
a ", "-joined sorted list. The file defines the one-hot columns used for
machine-learning training matrices.
"""

import numpy as np
import pandas as pd

from .sample_id import (
    NUM_BASE_FRAGMENTS,
    STRAIN_SIZE,
    INSERT_COL,
    DELETE_COL,
)

import os

# choice value meaning "nothing here" in a base fragment
NULL_CHOICE = "0"


class ChoiceTracker:
    """
    Accumulates the distinct values of each strain field.
    """

    def __init__(self):
        self.choices = [set() for _ in range(STRAIN_SIZE)]

    def add(self, sample):
        """
        Record the strain fields of a SampleId.
        """

        for i, fragment in enumerate(sample.base_fragments()):
            self.choices[i].add(fragment)
        self.choices[INSERT_COL].update(sample.inserts())
        self.choices[DELETE_COL].update(sample.deletes())

    @property
    def num_columns(self):
        """
        number of columns needed to encode a strain (one per choice, less
        one per field for the implied default)
        """
        return 1 + sum(len(c) - 1 for c in self.choices)

    def lines(self):
        return [", ".join(sorted(c)) for c in self.choices]

    def write(self, filename):
        """
        Write the choices file.
        """

        with open(filename, "w") as f:
            for line in self.lines():
                f.write(f"{line}\n")


def _split_choice_line(line):
    return [c for c in line.strip().split(", ") if c.strip() != ""]


def read_choices(filename):
    """
    Read a choices file.

    Parameters
    ----------
    filename : str
        path to the choices file.

    Returns
    -------
    list
        seven lists of choice strings: one per base fragment, then the insert
        genes, then the delete genes.

    Raises
    ------
    FileNotFoundError
        if the file does not exist.
    ValueError
        if the file has fewer than seven lines.
    """

    if not os.path.isfile(filename):
        raise FileNotFoundError(f"choices file '{filename}' not found.")

    with open(filename) as f:
        lines = [line.rstrip("\n") for line in f]

    if len(lines) < STRAIN_SIZE:
        raise ValueError(
            f"choices file '{filename}' has {len(lines)} lines; {STRAIN_SIZE} "
            "are required."
        )

    return [_split_choice_line(line) for line in lines[:STRAIN_SIZE]]


class SampleFormatter:
    """
    Converts sample IDs into one-hot training vectors.

    The columns are: one per non-null choice of each base fragment, one per
    insertable gene, one per deletable gene ("D" prefix), then "IPTG" (0/1)
    and "time" (hours).

    Parameters
    ----------
    choices_file : str
        choices file written by ``thrfix``.
    """

    def __init__(self, choices_file):

        all_choices = read_choices(choices_file)

        self.base_choices = []
        for i in range(NUM_BASE_FRAGMENTS):
            choices = [c for c in all_choices[i] if c != NULL_CHOICE]
            if len(choices) == 0:
                raise ValueError(
                    f"Invalid choice line #{i+1} in {choices_file}."
                )
            self.base_choices.append(choices)

        self.insert_choices = all_choices[INSERT_COL]
        self.delete_choices = all_choices[DELETE_COL]

    @property
    def num_columns(self):
        return len(self.titles())

    def titles(self):
        """list of column names for the one-hot vectors"""

        out = []
        for choices in self.base_choices:
            out.extend(choices)
        out.extend(self.insert_choices)
        out.extend(f"D{d}" for d in self.delete_choices)
        out.append("IPTG")
        out.append("time")

        return out

    def one_hot(self, sample):
        """
        Encode a SampleId as a float vector. Values not present in the
        choices are left at zero.
        """

        out = np.zeros(self.num_columns, dtype=float)

        offset = 0
        for choices, fragment in zip(self.base_choices, sample.base_fragments()):
            if fragment in choices:
                out[offset + choices.index(fragment)] = 1.0
            offset += len(choices)

        for gene in sample.inserts():
            if gene in self.insert_choices:
                out[offset + self.insert_choices.index(gene)] = 1.0
        offset += len(self.insert_choices)

        for gene in sample.deletes():
            if gene in self.delete_choices:
                out[offset + self.delete_choices.index(gene)] = 1.0
        offset += len(self.delete_choices)

        if sample.is_iptg():
            out[offset] = 1.0
        out[offset + 1] = sample.time_point

        return out

    def to_dataframe(self, samples):
        """
        Build a dataframe with a "sample" column followed by the one-hot
        columns for each SampleId in ``samples``.
        """

        samples = list(samples)
        titles = self.titles()
        if len(samples) == 0:
            values = np.zeros((0, len(titles)), dtype=float)
        else:
            values = np.vstack([self.one_hot(s) for s in samples])

        df = pd.DataFrame(values, columns=titles)
        df.insert(0, "sample", [str(s) for s in samples])

        return df

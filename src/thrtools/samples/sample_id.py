"""
Structured sample identifiers.

A sample ID is 10 underscore-separated fields with an optional 11th
replicate field, for example ``7_0_TA1_C_asdT_zwf_DlysCDmetL_I_5p5_M1``.
The fields are, in order: host, operon_deleted, operon, loc, asd, insert,
delete, iptg, time and medium. Time uses ``p`` in place of the decimal
point, and ``ML`` when the time point is unknown.
"""

import numpy as np

from thrtools.data import load_legacy_strain_config

import functools
import re

# Field positions
HOST_COL = 0
OPERON_DELETED_COL = 1
OPERON_COL = 2
LOC_COL = 3
ASD_COL = 4
INSERT_COL = 5
DELETE_COL = 6
INDUCE_COL = 7
TIME_COL = 8
MEDIUM_COL = 9
REPLICATE_COL = 10

FIELD_NAMES = ["host",
               "operon_deleted",
               "operon",
               "loc",
               "asd",
               "insert",
               "delete",
               "iptg",
               "time",
               "medium"]

# number of required fields
NORMAL_SIZE = 10
# number of fields in the strain portion (everything before iptg)
STRAIN_SIZE = 7
# number of single-choice fragments before the insert field
NUM_BASE_FRAGMENTS = 5

NO_INSERT = "000"
NO_DELETE = "D000"
UNKNOWN_TIME = "ML"
IPTG_ON = "I"
IPTG_OFF = "0"

# host number, optional deletion block, optional plasmid, optional insertion.
# Underscores separate ID fields, so the deletion and insertion parts may not
# contain one.
LEGACY_STRAIN = re.compile(
    r"(\d+)([Dd][^\s_+]*(?:\s+[^\sp_+][^\s_]*)*)?(?:\s+(p\S+))?(?:\s+\+([^\s_]+))?"
)

_TIME_TEXT = re.compile(r"\d+(\.\d*)?|\.\d+")
_DELETE_SPLIT = re.compile(r"D(?=[a-z])")


class FormatError(ValueError):
    """
    Raised when a string is not a valid sample ID.
    """


@functools.lru_cache(maxsize=None)
def _default_legacy_config():
    return load_legacy_strain_config()


def _parse_time(text, raw):
    if text == UNKNOWN_TIME:
        return np.nan
    decoded = text.replace("p", ".")
    if not _TIME_TEXT.fullmatch(decoded):
        raise FormatError(f"Invalid time point '{text}' in sample ID '{raw}'.")
    return float(decoded)


def format_time(time):
    """
    Encode a time point for a sample ID: one decimal place, a trailing ".0"
    dropped, and "p" in place of the decimal point. NaN becomes "ML".

    >>> format_time(5.5)
    '5p5'
    >>> format_time(24.0)
    '24'
    """

    if time is None or np.isnan(time):
        return UNKNOWN_TIME
    text = f"{time:.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return text.replace(".", "p")


def _cmp(a, b):
    return (a > b) - (a < b)


def _cmp_time(a, b):
    # NaN (unknown time) sorts after every real time point
    a_nan = bool(np.isnan(a))
    b_nan = bool(np.isnan(b))
    if a_nan or b_nan:
        return _cmp(a_nan, b_nan)
    return _cmp(a, b)


def split_inserts(insert_field):
    """
    List the genes in an insert field ("000" means none).
    """

    if insert_field == NO_INSERT:
        return []
    return [g for g in insert_field.split("-") if g != ""]


def split_deletes(delete_field):
    """
    List the genes in a delete field ("D000" means none). Each gene is
    prefixed by "D" and starts with a lower-case letter.
    """

    if delete_field == NO_DELETE:
        return []
    return [g for g in _DELETE_SPLIT.split(delete_field) if g != ""]


def join_inserts(genes):
    genes = sorted(set(genes))
    if len(genes) == 0:
        return NO_INSERT
    return "-".join(genes)


def join_deletes(genes):
    genes = sorted(set(genes))
    if len(genes) == 0:
        return NO_DELETE
    return "D" + "D".join(genes)


def is_constructed_strain(strain):
    """
    Return True if a strain string (see SampleId.to_strain) has at least one
    inserted or deleted gene.
    """

    fragments = strain.split("_")
    if len(fragments) < STRAIN_SIZE:
        raise FormatError(f"Invalid strain string '{strain}'.")
    return (fragments[INSERT_COL] != NO_INSERT or
            fragments[DELETE_COL] != NO_DELETE)


def _decode_deletions(block, protein_errors, bad_deletes):
    """
    Walk a legacy deletion block ("DlysCDmetL", "dthrABCdrhtA") gene by gene.
    Each gene starts after a "d"; its first three letters are lower case and
    the rest upper case.
    """

    text = re.sub(r"\s+", "", block).lower()
    deletes = []
    pos = 1
    while pos < len(text):
        end = pos + 3
        while end < len(text) and text[end] != "d":
            end += 1
        gene = text[pos:pos + 3] + text[pos + 3:end].upper()
        if gene not in bad_deletes:
            deletes.append(protein_errors.get(gene, gene))
        pos = end + 1

    return deletes


@functools.total_ordering
class SampleId:
    """
    Immutable structured sample identifier.

    Sample IDs sort field by field. All fields compare as text except the
    time point, which compares numerically (ties broken by the text so the
    order is strict). A missing replicate field sorts as "". Two IDs are
    equal only if every field matches exactly.

    Parameters
    ----------
    sample_data : str
        the underscore-delimited ID string.

    Raises
    ------
    FormatError
        if the string has fewer than 10 or more than 11 fields, an empty
        field, or a non-numeric time point.
    """

    __slots__ = ("_fragments", "_time")

    def __init__(self, sample_data):

        raw = str(sample_data).strip()
        fragments = raw.split("_")
        if len(fragments) < NORMAL_SIZE:
            raise FormatError(
                f"Sample ID '{raw}' has {len(fragments)} fields; at least "
                f"{NORMAL_SIZE} are required."
            )
        if len(fragments) > NORMAL_SIZE + 1:
            raise FormatError(
                f"Sample ID '{raw}' has {len(fragments)} fields; at most "
                f"{NORMAL_SIZE + 1} are allowed."
            )
        if "" in fragments:
            raise FormatError(f"Sample ID '{raw}' has an empty field.")

        self._fragments = tuple(fragments)
        self._time = _parse_time(fragments[TIME_COL], raw)

    @classmethod
    def parse(cls, raw):
        """
        Parse an ID string. Same as calling the constructor.
        """
        return cls(raw)

    @classmethod
    def translate(cls, strain, time, iptg, medium, config=None):
        """
        Build a sample ID from a legacy free-text strain label.

        A legacy label is a host number, an optional deletion block, an
        optional plasmid code and an optional insertion, e.g.
        "277DlysCDmetL pfb6.4.2 +zwf".

        Parameters
        ----------
        strain : str
            legacy strain label.
        time : float
            time point in hours (NaN if unknown).
        iptg : bool
            True if the sample was induced.
        medium : str
            medium code.
        config : str or dict, optional
            legacy translation tables (see thrtools.data). If None, the
            packaged tables are used.

        Returns
        -------
        SampleId or None
            the new ID, or None if the label does not have the legacy form.
        """

        if config is None:
            config = _default_legacy_config()
        elif not isinstance(config, dict) or "bad_deletes" not in config \
                or not isinstance(config["bad_deletes"], set):
            config = load_legacy_strain_config(config)

        m = LEGACY_STRAIN.fullmatch(str(strain).strip())
        if m is None:
            return None
        host, deletions, plasmid, insert = m.groups()

        fragments = [None] * NORMAL_SIZE
        fragments[HOST_COL] = config["host_map"].get(host, host)

        plasmid_fields = config["plasmid_map"].get(plasmid,
                                                   config["plasmid_default"])
        fragments[OPERON_DELETED_COL:ASD_COL + 1] = list(plasmid_fields)
        if plasmid is None and host == config["plasmid_free_host"]:
            fragments[LOC_COL] = config["plasmid_free_loc"]

        deletes = []
        if deletions is not None:
            deletes = _decode_deletions(deletions,
                                        config["protein_errors"],
                                        config["bad_deletes"])
        if len(deletes) == 0:
            fragments[DELETE_COL] = NO_DELETE
        else:
            fragments[DELETE_COL] = "D" + "D".join(deletes)

        if insert is None:
            fragments[INSERT_COL] = NO_INSERT
        else:
            fragments[INSERT_COL] = insert[:3] + insert[3:].upper()

        fragments[INDUCE_COL] = IPTG_ON if iptg else IPTG_OFF
        fragments[TIME_COL] = format_time(time)
        fragments[MEDIUM_COL] = medium

        try:
            return cls("_".join(fragments))
        except FormatError:
            return None

    # -- accessors ------------------------------------------------------------

    @property
    def fragments(self):
        """tuple of all the ID fields"""
        return self._fragments

    def fragment(self, i):
        return self._fragments[i]

    @property
    def time_point(self):
        """time point in hours (NaN if unknown)"""
        return self._time

    @property
    def replicate(self):
        """replicate suffix, or None"""
        if len(self._fragments) > NORMAL_SIZE:
            return self._fragments[REPLICATE_COL]
        return None

    @property
    def medium(self):
        return self._fragments[MEDIUM_COL]

    def is_iptg(self):
        return self._fragments[INDUCE_COL] == IPTG_ON

    def inserts(self):
        """sorted list of inserted genes"""
        return sorted(set(split_inserts(self._fragments[INSERT_COL])))

    def deletes(self):
        """sorted list of deleted genes (without the "D" prefix)"""
        return sorted(set(split_deletes(self._fragments[DELETE_COL])))

    def is_constructed(self):
        """True if the sample has at least one inserted or deleted gene"""
        return len(self.inserts()) > 0 or len(self.deletes()) > 0

    def base_fragments(self):
        """the single-choice fields in front of the insert field"""
        return list(self._fragments[:NUM_BASE_FRAGMENTS])

    def to_strain(self):
        """
        The strain portion of the ID: the fields in front of the induction
        flag, with inserts and deletes in canonical order. Samples differing
        only in induction, time, medium or replicate share a strain.
        """
        parts = self.base_fragments()
        parts.append(join_inserts(self.inserts()))
        parts.append(join_deletes(self.deletes()))
        return "_".join(parts)

    def to_timeless(self):
        """
        The ID with the time field removed. Samples that differ only by time
        point share a timeless string.
        """
        return "_".join(f for i, f in enumerate(self._fragments) if i != TIME_COL)

    def components(self):
        """
        The building blocks of the sample: the base fragments other than "0",
        each inserted gene, each deleted gene prefixed with "D", and "IPTG"
        for induced samples.
        """
        parts = [f for f in self.base_fragments() if f != "0"]
        parts.extend(self.inserts())
        parts.extend("D" + d for d in self.deletes())
        if self.is_iptg():
            parts.append("IPTG")
        return parts

    # -- comparison -----------------------------------------------------------

    def _compare(self, other):
        for i in range(NORMAL_SIZE):
            a = self._fragments[i]
            b = other._fragments[i]
            if i == TIME_COL:
                c = _cmp_time(self._time, other._time)
                if c == 0:
                    c = _cmp(a, b)
            else:
                c = _cmp(a, b)
            if c != 0:
                return c
        return _cmp(self.replicate or "", other.replicate or "")

    def __eq__(self, other):
        if not isinstance(other, SampleId):
            return NotImplemented
        return self._fragments == other._fragments

    def __lt__(self, other):
        if not isinstance(other, SampleId):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self):
        return hash(self._fragments)

    def __str__(self):
        return "_".join(self._fragments)

    def __repr__(self):
        return f"SampleId('{self}')"

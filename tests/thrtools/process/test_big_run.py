import pytest
import numpy as np
import pandas as pd
import openpyxl

from thrtools.samples.sample_id import SampleId
from thrtools.samples.choices import ChoiceTracker
from thrtools.process.big_run import (
    big_run,
    BigRunStats,
    parse_raw_productions,
    main,
    PRODUCTION_COLUMNS,
)
from thrtools.process.big_run_report import (
    REPORT_HEAD,
    REPORT_TAIL,
    PRED_COLUMNS,
)

S_CTRL = "7_0_0_A_asdO_000_D000_0_24_M1"
S_ZWF = "7_D_TasdA1_P_asdD_zwf_DlysC_I_24_M1"
S_PNT = "M_D_TasdA1_P_asdD_pntAB_DlysC_I_24_M1"

PRODUCTION_ROWS = [
    ["1", "277", S_CTRL, "1.500000000", "1.20", "",
     "P1:A1, P1:A2", "1.4000,1.6000", "1.2000,1.2000"],
    ["2", "277 pfb6.4.2 +zwf", S_ZWF, "3.000000000", "1.00", "",
     "P2:B1, (P2:B2)", "3.0000,(9.0000)", "1.0000,(1.0000)"],
    ["3", "926 pfb6.4.2 +pntab", S_PNT, "2.500000000", "0.90", "?",
     "P1:D1, P2:D2", "2.4000,2.6000", "0.9000,0.9000"],
    ["4", "277 pfb6.4.2 +zwf", S_ZWF, "0.500000000", "0.80", "Y",
     "P1:C1", "0.5000", "0.8000"],
]


def _write_production(path, rows):
    lines = ["\t".join(PRODUCTION_COLUMNS)]
    lines.extend("\t".join(r) for r in rows)
    path.write_text("\n".join(lines) + "\n")
    return str(path)


def _write_choices(path, samples):
    tracker = ChoiceTracker()
    for s in samples:
        tracker.add(SampleId(s))
    tracker.write(str(path))
    return str(path)


@pytest.fixture
def inputs(tmp_path):

    prod = _write_production(tmp_path / "production.txt", PRODUCTION_ROWS)
    choices = _write_choices(tmp_path / "choices.tbl", [S_CTRL, S_ZWF, S_PNT])

    (tmp_path / "preds.txt").write_text("sample\tprediction\n"
                                        f"{S_ZWF}\t2.8\n"
                                        f"{S_PNT}\t1.0\n"
                                        "Q_0_0_0_asdO_000_D000_0_24_M1\t5.0\n")

    runs = tmp_path / "runs.txt"
    runs.write_text("name\tpattern\tpredictions\n"
                    "first\tP1:.*\t\n"
                    "second\tP2:.*\tpreds.txt\n")

    return {"prod": prod,
            "runs": str(runs),
            "choices": choices,
            "out": str(tmp_path / "report.xlsx"),
            "dir": tmp_path}


@pytest.fixture
def sheets(inputs):
    return big_run(inputs["prod"], inputs["runs"], inputs["out"], verbose=False)


def _stat_table(df, key_col, value_col):
    return dict(zip(df[key_col], df[value_col]))


def test_parse_raw_productions():

    assert parse_raw_productions("1.4000,(9.0000),2.0") == ([1.4, 2.0], 1)
    assert parse_raw_productions("(1.0),(2.0)") == ([], 2)
    assert parse_raw_productions("") == ([], 0)


def test_big_run_stats():

    stats = BigRunStats([1.0, 2.0])
    assert sorted(stats.count_maps) == [0.0, 1.0, 2.0]

    stats.add_good_sample(SampleId(S_ZWF), 1.5)
    stats.add_good_sample(SampleId(S_CTRL), 0.5)

    assert stats.good_samples == 2
    assert stats.count_maps[0.0]["7"] == 2
    assert stats.count_maps[1.0]["7"] == 1
    assert stats.count_maps[2.0]["7"] == 0
    assert stats.count_totals[0.0] == 2
    assert stats.count_totals[1.0] == 1

    assert stats.pair_map["zwf"]["DlysC"] == [1.5]
    assert stats.pair_map["7"]["asdO"] == [0.5]
    assert "7" not in stats.pair_map["7"]
    assert stats.constructed_strains == {"7_D_TasdA1_P_asdD_zwf_DlysC"}

    stats.add_tries(2, 1)
    stats.add_tries(3, 0)
    assert stats.experiment_count == 6
    assert stats.outlier_count == 1
    assert stats.try_counts == {2: 1, 3: 1}


def test_sheet_order(sheets, inputs):

    expected = ["full_report",
                "first_report",
                "second_report",
                "xmatrix",
                "second_pred",
                "performance",
                "components",
                "comp_pairs",
                "Good Samples"]

    assert list(sheets) == expected

    wb = openpyxl.load_workbook(inputs["out"])
    assert wb.sheetnames == expected


def test_full_report(sheets):

    full = sheets["full_report"]

    assert list(full.columns) == REPORT_HEAD + ["pred_second"] + REPORT_TAIL
    assert list(full["num"]) == [1, 2, 3, 4]
    assert list(full["first_run"]) == ["first", "second", "first", "first"]
    assert list(full["constructed"]) == ["", "Y", "Y", "Y"]
    assert list(full["max_production"]) == pytest.approx([1.6, 3.0, 2.6, 0.5])

    preds = list(full["pred_second"])
    assert np.isnan(preds[0])
    assert preds[1:] == [2.8, 1.0, 2.8]

    assert list(sheets["first_report"]["num"]) == [1, 3, 4]
    assert list(sheets["second_report"]["num"]) == [2]


def test_xmatrix(sheets):

    xm = sheets["xmatrix"]

    assert len(xm) == 4
    assert list(xm.columns[:1]) == ["sample"]
    assert list(xm.columns[-3:]) == ["density", "mean_production", "max_production"]
    assert list(xm["sample"]) == [S_CTRL, S_ZWF, S_PNT, S_ZWF]
    assert list(xm["IPTG"]) == [0.0, 1.0, 1.0, 1.0]
    assert list(xm["mean_production"]) == pytest.approx([1.5, 3.0, 2.5, 0.5])


def test_prediction_sheet(sheets):

    pred = sheets["second_pred"]

    assert list(pred.columns) == PRED_COLUMNS + ["production", "prediction"]
    assert list(pred["pred_level"]) == [2.8, 1.0]
    assert list(pred["tp"]) == [1, 2]
    assert list(pred["tn"]) == [1, 0]

    # one first-run pair for the second run
    assert pred.loc[0, "production"] == 3.0
    assert pred.loc[0, "prediction"] == 2.8
    assert np.isnan(pred.loc[1, "production"])


def test_performance(sheets):

    perf = sheets["performance"].set_index("statistic")

    assert list(perf.columns) == ["first", "second", "Detailed description"]

    assert perf.loc["tot_size", "first"] == 2
    assert perf.loc["tot_size", "second"] == 2
    assert perf.loc["new_size", "first"] == 2
    assert perf.loc["new_size", "second"] == 1
    assert perf.loc["max_prod_all", "second"] == 3.0
    assert perf.loc["max_prod_control", "first"] == 1.5
    assert perf.loc["max_prod_constructed", "first"] == 2.5

    assert perf.loc["predictions_computed", "second"] == 3
    assert perf.loc["high_predictions_computed", "second"] == 2
    assert perf.loc["tot_predictions", "second"] == 2
    assert perf.loc["new_predictions", "second"] == 1
    assert perf.loc["max_prediction", "second"] == 2.8
    assert perf.loc["MAE", "second"] == pytest.approx(0.2)
    assert pd.isna(perf.loc["Pearson", "second"])

    # prediction statistics are blank for runs without predictions
    assert pd.isna(perf.loc["max_prediction", "first"])
    assert pd.isna(perf.loc["true_positive_1.20", "first"])

    assert perf.loc["true_positive_1.20", "second"] == 1
    assert perf.loc["high_samples_2.00", "first"] == 1
    assert perf.loc["high_constructed_1.20", "second"] == 2


def test_components(sheets):

    comps = sheets["components"].set_index("component")

    assert list(comps.columns[:7]) == ["cutoff_0.0",
                                       "cutoff_1.2", "pct_1.2",
                                       "cutoff_2.0", "pct_2.0",
                                       "cutoff_4.0", "pct_4.0"]

    assert comps.loc["7", "cutoff_0.0"] == 2
    assert comps.loc["7", "cutoff_1.2"] == 2
    assert comps.loc["7", "pct_1.2"] == 100.0
    assert comps.loc["7", "cutoff_2.0"] == 1
    assert comps.loc["7", "pct_2.0"] == 50.0
    assert comps.loc["7", "A"] == 1
    assert comps.loc["D", "P"] == 2
    assert pd.isna(comps.loc["7", "7"])

    pairs = sheets["comp_pairs"].set_index("component")
    assert pairs.loc["D", "P"] == 3.0
    assert pairs.loc["zwf", "DlysC"] == 3.0


def test_good_samples(sheets):

    stats = _stat_table(sheets["Good Samples"], "Statistic", "Value")

    assert stats["Number of good samples"] == 3
    assert stats["Number of bad samples"] == 1
    assert stats["Total number of experiments"] == 6
    assert stats["Total number of outliers"] == 1
    assert stats["Number of constructed strains"] == 2
    assert stats["Samples with  1 good tries"] == 1
    assert stats["Samples with  2 good tries"] == 2
    assert stats["Samples with production >= 1.20"] == 3
    assert stats["Samples with production >= 2.00"] == 2
    assert stats["Samples with production >= 4.00"] == 0
    assert stats["Mean absolute error in experiments"] == pytest.approx(0.4/6)


def test_first_run_attribution(tmp_path):

    prod = _write_production(tmp_path / "production.txt",
                             [["1", "277", S_CTRL, "1.000000000", "1.00", "",
                               "P1:A1", "1.0000", "1.0000"]])
    choices = _write_choices(tmp_path / "choices.tbl", [S_CTRL, S_ZWF])

    runs = tmp_path / "runs.txt"
    runs.write_text("name\tpattern\nfirst\tP1:.*\nsecond\tP9:.*\n")

    sheets = big_run(prod, str(runs), str(tmp_path / "out.xlsx"),
                     choices=choices, verbose=False)

    assert list(sheets["full_report"]["first_run"]) == ["first"]

    perf = sheets["performance"].set_index("statistic")
    assert perf.loc["tot_size", "first"] == 1
    assert perf.loc["tot_size", "second"] == 0


def test_no_first_run(inputs):

    rows = PRODUCTION_ROWS + [["5", "277", S_CTRL, "1.0", "1.0", "",
                               "Q1:A1", "1.0000", "1.0000"]]
    prod = _write_production(inputs["dir"] / "production.txt", rows)

    with pytest.raises(IOError, match="Q1:A1"):
        big_run(prod, inputs["runs"], inputs["out"], verbose=False)


def test_unmatched_origin_reported(inputs, capsys):

    rows = [["1", "277", S_CTRL, "1.0", "1.0", "",
             "P1:A1, Q9:Z9", "1.0000,1.0000", "1.0000,1.0000"]]
    prod = _write_production(inputs["dir"] / "production.txt", rows)

    big_run(prod, inputs["runs"], inputs["out"], verbose=True)

    out = capsys.readouterr().out
    assert 'Could not find a run for origin "Q9:Z9"' in out
    assert "Workbook written to" in out


def test_input_checks(inputs, tmp_path):

    with pytest.raises(ValueError, match="scores"):
        big_run(inputs["prod"], inputs["runs"], inputs["out"],
                scores="2.0,1.2", verbose=False)

    with pytest.raises(FileNotFoundError):
        big_run(inputs["prod"] + ".missing", inputs["runs"], inputs["out"],
                verbose=False)

    other = tmp_path / "other"
    other.mkdir()
    runs = other / "runs.txt"
    runs.write_text("name\tpattern\nall\tP.*\n")
    with pytest.raises(FileNotFoundError, match="choices.tbl"):
        big_run(inputs["prod"], str(runs), inputs["out"], verbose=False)

    # an explicit choices file works from anywhere
    big_run(inputs["prod"], str(runs), inputs["out"],
            choices=inputs["choices"], verbose=False)


def test_empty_run_file(inputs):

    runs = inputs["dir"] / "runs.txt"
    runs.write_text("name\tpattern\n")

    with pytest.raises(ValueError, match="no runs"):
        big_run(inputs["prod"], str(runs), inputs["out"], verbose=False)


def test_main(inputs):

    sheets = main([inputs["prod"], inputs["runs"], inputs["out"],
                   "--scores", "1.5,3",
                   "--choices", inputs["choices"],
                   "--verbose"])

    stats = _stat_table(sheets["Good Samples"], "Statistic", "Value")
    assert stats["Samples with production >= 1.50"] == 3
    assert stats["Samples with production >= 3.00"] == 1


def test_strain_statistics(sheets):

    perf = sheets["performance"].set_index("statistic")

    assert perf.loc["strain_predictions", "second"] == 2
    assert perf.loc["strain_MAE", "second"] == pytest.approx(0.2)
    assert pd.isna(perf.loc["strain_Pearson", "second"])
    assert perf.loc["strain_AUC", "second"] == perf.loc["AUC", "second"]
    assert pd.isna(perf.loc["strain_AUC", "first"])


def test_suspect_rows_not_scored(sheets):

    # row 4 is a suspect copy of a good sample: its prediction is shown but
    # not scored a second time
    full = sheets["full_report"]
    suspect = full.loc[full["bad"] == "Y", :]
    assert list(suspect["num"]) == [4]
    assert list(suspect["pred_second"]) == [2.8]

    perf = sheets["performance"].set_index("statistic")
    assert perf.loc["tot_predictions", "second"] == 2
    assert list(sheets["second_pred"]["production"].dropna()) == [3.0]


def test_sample_without_production(inputs):

    s_host = "M_0_0_0_asdO_000_D000_0_24_M1"
    rows = PRODUCTION_ROWS + [["5", "926", s_host, "", "", "?",
                               "P2:E1", "0.4000", "0.0500"]]
    prod = _write_production(inputs["dir"] / "production.txt", rows)
    choices = _write_choices(inputs["dir"] / "choices.tbl",
                             [S_CTRL, S_ZWF, S_PNT, s_host])

    (inputs["dir"] / "preds.txt").write_text("sample\tprediction\n"
                                             f"{S_ZWF}\t2.8\n"
                                             f"{S_PNT}\t1.0\n"
                                             f"{s_host}\t3.5\n")

    sheets = big_run(prod, inputs["runs"], inputs["out"],
                     choices=choices, verbose=False)

    # the row is still reported
    full = sheets["full_report"]
    assert list(full["num"]) == [1, 2, 3, 4, 5]
    assert np.isnan(full.loc[4, "thr_production"])
    assert full.loc[4, "pred_second"] == 3.5

    # but it is left out of every statistic
    perf = sheets["performance"].set_index("statistic")
    assert perf.loc["tot_size", "second"] == 2
    assert perf.loc["tot_predictions", "second"] == 2
    assert perf.loc["MAE", "second"] == pytest.approx(0.2)
    assert perf.loc["AUC", "second"] == pytest.approx(0.0)

    stats = _stat_table(sheets["Good Samples"], "Statistic", "Value")
    assert stats["Number of good samples"] == 3
    assert stats["Number of good samples without production"] == 1

    comps = sheets["components"].set_index("component")
    assert comps.loc["M", "cutoff_0.0"] == 1

    pairs = sheets["comp_pairs"].set_index("component")
    assert pairs.loc["D", "P"] == 3.0

import numpy as np
import pandas as pd

from cli import analyze as cli_analyze
from tascan.data.series import PriceSeries


def _swing_series():
    t = np.arange(120)
    closes = 100 + 10 * np.sin(t * 0.15) + 0.05 * t
    dates = pd.date_range("2023-01-02", periods=len(closes), freq="B")
    return PriceSeries.from_arrays(closes, index=dates)


def test_format_analysis_sections():
    text = cli_analyze.format_analysis("NASDAQ:TEST", _swing_series(), threshold_pct=5.0)
    assert text.startswith("NASDAQ:TEST: 120 bars")
    assert "RSI(14):" in text
    assert "QQE: fast" in text
    assert "ZigZag 5.0%" in text
    assert "high line: slope" in text
    assert "low line: slope" in text


def test_format_analysis_short_series():
    series = PriceSeries.from_arrays([100.0, 101.0, 102.0])
    text = cli_analyze.format_analysis("X", series)
    assert "SMA(10): n/a" in text
    assert "MACD: n/a" in text
    assert "QQE: n/a" in text
    assert "(local extrema fallback)" in text


def test_analyze_main_csv(tmp_path, capsys):
    series = _swing_series()
    series.frame.rename_axis("Date").to_csv(tmp_path / "TEST.csv")

    exit_code = cli_analyze.main(["TEST", "--provider", "csv", "--data-dir", str(tmp_path)])
    assert exit_code == 0
    assert "TEST: 120 bars" in capsys.readouterr().out


def test_analyze_main_missing_file(tmp_path, capsys):
    exit_code = cli_analyze.main(["NOPE", "--provider", "csv", "--data-dir", str(tmp_path)])
    assert exit_code == 1
    assert "not found" in capsys.readouterr().err


def test_analyze_main_invalid_threshold(capsys):
    assert cli_analyze.main(["AAPL", "--threshold", "0"]) == 1
    assert "threshold" in capsys.readouterr().err

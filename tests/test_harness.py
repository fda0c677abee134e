import math

import pytest

from cwdecode.harness import (
    format_summary,
    format_table,
    parse_name,
    run_directory,
    run_file,
    score_against_known,
)
from cwdecode.synth import sample_filename, synthesize
from cwdecode.wavfile import write_wav


@pytest.mark.parametrize("decoded, known, expected", [
    ("CQ", "CQ", 100.0),
    ("QC", "CQ", 100.0),
    ("C", "CQ", 50.0),
    ("", "CQ", 0.0),
    ("CQCQ", "CQ", 100.0),
    ("XX", "CQ", 0.0),
])
def test_score(decoded, known, expected):
    assert score_against_known(decoded, known) == pytest.approx(expected)


def test_parse_name():
    assert parse_name("/x/sample_12_600_10_CQ_DE_W2ASM.wav") == (12, 600.0, "10", "CQ DE W2ASM")
    assert parse_name("sample_20_700_clean_SOS.wav") == (20, 700.0, "clean", "SOS")
    assert parse_name("recording.wav") is None


def test_sample_filename_parses_back():
    name = sample_filename("cq de w2asm", 12, 600, 10)
    assert name == "sample_12_600_10_CQ_DE_W2ASM.wav"
    assert parse_name(name) == (12, 600.0, "10", "CQ DE W2ASM")


def test_run_directory(tmp_path):
    write_wav(str(tmp_path / sample_filename("SOS", 20, 600, None)),
              synthesize("SOS", wpm=20, tone_hz=600), 8000)
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "broken.wav").write_bytes(b"garbage")

    results = run_directory(str(tmp_path))
    assert len(results) == 2
    good = next(r for r in results if r.expected)
    bad = next(r for r in results if r.error)

    assert good.decoded == "SOS"
    assert good.exact
    assert good.score_pct == 100.0
    assert good.unit_ms == pytest.approx(60.0)
    assert bad.expected is None
    assert math.isnan(bad.score_pct)

    table = format_table(results)
    assert "SOS" in table
    assert "ERROR" in table
    summary = format_summary(results)
    assert "20 wpm" in summary
    assert "errors=1" in summary


def test_run_file_unscored(tmp_path):
    path = tmp_path / "plain.wav"
    write_wav(str(path), synthesize("E", wpm=20), 8000)
    res = run_file(str(path))
    assert res.decoded == "E"
    assert res.expected is None
    assert not res.exact

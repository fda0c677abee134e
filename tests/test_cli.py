import json

import pytest

from cwdecode.cli import main


@pytest.fixture
def sos_wav(tmp_path):
    path = tmp_path / "sos.wav"
    assert main(["generate", "SOS", str(path), "--wpm", "20"]) == 0
    return path


def test_generate_and_decode(sos_wav, capsys):
    capsys.readouterr()
    assert main(["decode", str(sos_wav)]) == 0
    assert capsys.readouterr().out.strip() == "SOS"


def test_generate_default_name(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["generate", "cq", "--wpm", "12", "--snr-db", "10"]) == 0
    assert (tmp_path / "sample_12_600_10_CQ.wav").exists()


def test_decode_verbose(sos_wav, capsys):
    capsys.readouterr()
    assert main(["decode", "-v", str(sos_wav)]) == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "SOS"
    assert "600 Hz" in out
    assert "runs: -42 +6" in out


def test_decode_with_overrides(sos_wav, tmp_path, capsys):
    cfg = tmp_path / "cfg.json"
    cfg.write_text(json.dumps({"envelope": "rms"}))
    capsys.readouterr()
    assert main(["decode", str(sos_wav), "--config", str(cfg), "--threshold", "0.4"]) == 0
    assert capsys.readouterr().out.strip() == "SOS"


def test_decode_missing_file(tmp_path, capsys):
    assert main(["decode", str(tmp_path / "missing.wav")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_bad_config_file(sos_wav, tmp_path, capsys):
    cfg = tmp_path / "cfg.json"
    cfg.write_text('{"bogus": 1}')
    assert main(["decode", str(sos_wav), "--config", str(cfg)]) == 1
    assert "bogus" in capsys.readouterr().err


def test_plot_to_file(sos_wav, tmp_path):
    pytest.importorskip("matplotlib")
    png = tmp_path / "env.png"
    assert main(["decode", str(sos_wav), "--plot", str(png)]) == 0
    assert png.stat().st_size > 0


def test_harness(tmp_path, capsys):
    assert main(["generate", "SOS", str(tmp_path / "sample_20_600_clean_SOS.wav"), "--wpm", "20"]) == 0
    capsys.readouterr()
    assert main(["harness", str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "exact=  1" in out


def test_harness_empty_dir(tmp_path, capsys):
    assert main(["harness", str(tmp_path)]) == 1
    assert "No WAV files" in capsys.readouterr().out


def test_decode_continues_past_bad_file(sos_wav, tmp_path, capsys):
    capsys.readouterr()
    rc = main(["decode", str(tmp_path / "missing.wav"), str(sos_wav)])
    out, err = capsys.readouterr()
    assert rc == 1
    assert "Error:" in err
    assert "sos.wav: SOS" in out

import json

import yaml

from catalog_helper import sample_catalog

from dllist.cli import main
from dllist.config import CONCURRENCY_ENV
from dllist.reporting import SilentReporter, set_reporter


def _write_catalog(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(
        yaml.safe_dump(sample_catalog(), allow_unicode=True), encoding="utf-8"
    )
    return path


def teardown_function(_):
    set_reporter(SilentReporter())


def test_build_then_verify_raw(tmp_path, monkeypatch):
    monkeypatch.delenv(CONCURRENCY_ENV, raising=False)
    catalog = _write_catalog(tmp_path)
    out = tmp_path / "lists"
    rc = main(
        [
            "-r",
            "silent",
            "build",
            "--catalog",
            str(catalog),
            "-o",
            str(out),
            "-j",
            "2",
            "--no-compress",
        ]
    )
    assert rc == 0
    files = sorted(out.rglob("dllist.bin"))
    assert len(files) == 10
    assert main(["-r", "silent", "verify", "--raw", str(out / "1" / "1" / "dllist.bin")]) == 0


def test_compressed_region_build_verifies(tmp_path, capsys):
    catalog = _write_catalog(tmp_path)
    out = tmp_path / "lists"
    rc = main(
        [
            "-r",
            "silent",
            "build",
            "--catalog",
            str(catalog),
            "-o",
            str(out),
            "--region",
            "JAPAN",
        ]
    )
    assert rc == 0
    files = sorted(out.rglob("dllist.bin"))
    assert files == [out / "0" / "0" / "dllist.bin"]
    capsys.readouterr()
    assert main(["-r", "silent", "verify", "--json", str(files[0])]) == 0
    info = json.loads(capsys.readouterr().out)
    assert info["country_code"] == 1
    assert info["checksum"] == info["computed_checksum"]


def test_plain_reporter_prints_worker_status(tmp_path, capsys):
    catalog = _write_catalog(tmp_path)
    rc = main(
        [
            "build",
            "--catalog",
            str(catalog),
            "-o",
            str(tmp_path / "lists"),
            "--region",
            "NTSC",
            "--no-compress",
        ]
    )
    assert rc == 0
    err = capsys.readouterr().err
    assert "Starting worker - Region: 1, Language: 3" in err
    assert "Finished worker - Region: 1, Language: 3" in err
    assert "Build summary: lists=3" in err


def test_missing_catalog_is_fatal(tmp_path, capsys):
    rc = main(["-r", "silent", "build", "--catalog", str(tmp_path / "missing.yaml")])
    assert rc == 1
    assert "fatal error" in capsys.readouterr().err


def test_corrupt_list_fails_verify(tmp_path):
    bad = tmp_path / "dllist.bin"
    bad.write_bytes(b"\x00" * 200)
    assert main(["-r", "silent", "verify", "--raw", str(bad)]) == 1


def test_fatal_error_reported_as_json_event(tmp_path, capsys):
    rc = main(["-r", "json", "build", "--catalog", str(tmp_path / "missing.yaml")])
    assert rc == 1
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    err = next(e for e in events if e.get("level") == "error")
    assert err["code"] == "E_CONFIG"
    assert "missing.yaml" in err["message"]

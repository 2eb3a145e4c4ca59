import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from module_2_track_geotagging.app import cli
from module_2_track_geotagging.app.settings import get_settings


GPX = """<gpx xmlns="http://www.topografix.com/GPX/1/1"><trk><trkseg>
<trkpt lat="0.0" lon="0.0"><time>2024-03-05T08:00:00Z</time></trkpt>
<trkpt lat="10.0" lon="10.0"><time>2024-03-05T08:00:10Z</time></trkpt>
</trkseg></trk></gpx>"""


@pytest.fixture()
def gpx_path(tmp_path: Path) -> Path:
    path = tmp_path / "ride.gpx"
    path.write_text(GPX, encoding="utf-8")
    return path


def test_settings_from_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("GEOTAG_GPX_PATH", str(tmp_path / "track.gpx"))
    monkeypatch.setenv("GEOTAG_LOG_FORMAT", "json")
    settings = get_settings()
    assert settings.gpx_path == tmp_path / "track.gpx"
    assert settings.log_format == "json"


def test_settings_reject_unknown_log_format() -> None:
    with pytest.raises(ValidationError):
        get_settings(log_format="xml")


def test_cli_prints_resolved_locations(gpx_path: Path, capsys) -> None:
    exit_code = cli.main(
        ["--gpx", str(gpx_path), "--at", "2024-03-05T08:00:05Z", "--offset", "2.5", "--offset", "30"]
    )

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["track"]["points"] == 2
    assert output["timestamps"][0]["location"] == {"latitude": 5.0, "longitude": 5.0, "method": "interpolated"}
    assert output["offsets"][0]["location"]["latitude"] == pytest.approx(2.5)
    assert output["offsets"][1]["location"]["method"] == "clamped_end"


def test_cli_fails_without_track_data(tmp_path: Path) -> None:
    empty = tmp_path / "empty.gpx"
    empty.write_text("<gpx><trk/></gpx>", encoding="utf-8")
    assert cli.main(["--gpx", str(empty)]) == 2


def test_cli_fails_without_gpx_path(monkeypatch) -> None:
    monkeypatch.delenv("GEOTAG_GPX_PATH", raising=False)
    assert cli.main([]) == 2

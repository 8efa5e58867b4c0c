import json

import pytest

from aflboard import cli

from .test_api import DATASETS, _write_datasets


def test_team_command_prints_view(tmp_path, capsys):
    _write_datasets(tmp_path)

    cli.main(["--storage-root", str(tmp_path), "team", "Collingwood", "--season", "2025"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["url"] == "/team/40?season=2025"
    assert payload["view"]["team_name"] == "Collingwood"


def test_player_command_infers_team(tmp_path, capsys):
    _write_datasets(tmp_path)

    cli.main(["--storage-root", str(tmp_path), "player", "CD_I2", "--outlook", "pessimistic"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["selection"]["team_id"] == "30"
    assert payload["view"]["player"]["name"] == "Bravo Player"


def test_failed_load_exits_with_message(tmp_path):
    _write_datasets(tmp_path, names=[name for name in DATASETS if name != "team_kpis.csv"])

    with pytest.raises(SystemExit, match="team_kpis.csv"):
        cli.main(["--storage-root", str(tmp_path), "team", "40"])


def test_invalid_player_id_exits(tmp_path):
    _write_datasets(tmp_path)

    with pytest.raises(SystemExit, match="Invalid player id"):
        cli.main(["--storage-root", str(tmp_path), "player", "CD_I"])

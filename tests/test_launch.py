import json
import os
import sys

import pytest

from smcbox.launch import clients_main, launch_clients, launch_output_parties, ops_main

_RECORD = (
    "import json, sys, pathlib; "
    "conf = sys.argv[1].split('=', 1)[1]; "
    "pathlib.Path(conf + '.args').write_text(json.dumps(sys.argv[1:]))"
)

TEMPLATE = {
    "OutputParty_ID": "",
    "Cert_path": "cert.pem",
    "Key_path": "key.pem",
    "Port": "",
    "N": 4,
    "T": 1,
    "N_secrets": 3,
    "Q": 10631,
}


def test_launch_clients_passes_paths(tmp_path):
    prefix = f"{tmp_path}{os.sep}"
    codes = launch_clients(2, prefix, "in/", [sys.executable, "-c", _RECORD])
    assert codes == [0, 0]
    for number in (1, 2):
        recorded = json.loads((tmp_path / f"config_c{number}.json.args").read_text())
        assert recorded == [
            f"-confpath={prefix}config_c{number}.json",
            f"-inputpath=in/input_c{number}.json",
        ]


def test_launch_clients_returns_exit_codes(tmp_path):
    codes = launch_clients(2, "", "", [sys.executable, "-c", "import sys; sys.exit(3)"])
    assert codes == [3, 3]


def test_launch_clients_missing_program(tmp_path):
    with pytest.raises(FileNotFoundError):
        launch_clients(1, "", "", str(tmp_path / "missing"))


def test_clients_main_reports_missing_program(tmp_path):
    assert clients_main(["-n", "1", "--command", str(tmp_path / "missing")]) == 1


def _write_template(directory):
    (directory / "outputparty_template.json").write_text(json.dumps(TEMPLATE))


def test_launch_output_parties_writes_config_and_starts(tmp_path):
    _write_template(tmp_path)
    codes = launch_output_parties(1, [sys.executable, "-c", _RECORD], tmp_path)
    assert codes == [0]
    config = json.loads((tmp_path / "config" / "config_op1.json").read_text())
    assert config["OutputParty_ID"] == "op1"
    assert config["Port"] == "60000"
    recorded = json.loads((tmp_path / "config" / "config_op1.json.args").read_text())
    assert recorded == [
        f"-confpath={tmp_path / 'config' / 'config_op1.json'}",
        f"-exppath={tmp_path / 'input' / 'experiments.json'}",
    ]


def test_launch_output_parties_has_one_port(tmp_path):
    _write_template(tmp_path)
    with pytest.raises(ValueError):
        launch_output_parties(2, [sys.executable, "-c", _RECORD], tmp_path)


def test_ops_main_missing_template(tmp_path):
    assert ops_main(["-n", "1", "--generator-dir", str(tmp_path)]) == 1
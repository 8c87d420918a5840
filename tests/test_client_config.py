import json

import pytest

from smcbox.client_config import ClientConfig


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_round_trips_through_to_dict(tmp_path):
    data = {
        "Client_ID": "c3",
        "Token": "token",
        "URLs": ["http://127.0.0.1:50001/", "http://127.0.0.1:50002/"],
        "N": 4,
        "T": 1,
        "K": 2,
        "Q": 10631,
        "N_secrets": 3,
        "M": 1,
        "N_open": 3,
    }
    config = ClientConfig.load(_write(tmp_path / "c.json", data))
    assert config.to_dict() == data
    assert config.urls == data["URLs"]
    assert config.n_open == 3


def test_keys_match_ignoring_case(tmp_path):
    config = ClientConfig.load(_write(tmp_path / "c.json", {"client_id": "c7", "n": 4}))
    assert config.client_id == "c7"
    assert config.n == 4


def test_missing_fields_keep_zero_values(tmp_path):
    config = ClientConfig.load(_write(tmp_path / "c.json", {}))
    assert config == ClientConfig()


def test_field_names_in_file_order():
    assert list(ClientConfig().to_dict()) == [
        "Client_ID", "Token", "URLs", "N", "T", "K", "Q", "N_secrets", "M", "N_open",
    ]


def test_wrong_integer_type_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        ClientConfig.load(_write(tmp_path / "c.json", {"N": "four"}))


def test_urls_must_be_strings(tmp_path):
    with pytest.raises(ValueError):
        ClientConfig.load(_write(tmp_path / "c.json", {"URLs": [1, 2]}))


def test_not_an_object_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        ClientConfig.load(_write(tmp_path / "c.json", [1, 2]))


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ClientConfig.load(tmp_path / "absent.json")
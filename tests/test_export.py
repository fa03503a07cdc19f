import json
import os
import stat
import sys
from datetime import datetime, timezone

import base58
import pytest

from solvanity.core import generate_keypair
from solvanity.export import JsonFileSink, prepare_export, save_keypair_json
from solvanity.generator import KeypairResult
from solvanity.matcher import SearchPattern


@pytest.fixture
def result():
    return KeypairResult(*generate_keypair())


def test_prepare_export(result):
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    record = prepare_export(result, SearchPattern(suffix="pump"), created_at=created)

    assert record["publicKey"] == result.public_id
    assert record["privateKey"] == result.private_material
    assert bytes(record["secretKey"]) == base58.b58decode(result.private_material)
    assert len(record["secretKey"]) == 64
    assert record["isActive"] is False
    assert record["createdAt"] == "2024-01-02T03:04:05+00:00"
    assert record["prefix"] == ""
    assert record["suffix"] == "pump"


def test_save_keypair_json_creates_directories(tmp_path):
    path = save_keypair_json({"a": 1}, str(tmp_path / "nested" / "dir" / "k.json"))
    with open(path) as f:
        assert json.load(f) == {"a": 1}


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
def test_saved_file_is_private(tmp_path):
    path = save_keypair_json({"a": 1}, str(tmp_path / "k.json"))
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600


def test_sink_keys_files_by_public_id(tmp_path, result):
    sink = JsonFileSink(str(tmp_path))
    path = sink.save(result, SearchPattern(prefix="A"))

    assert path == str(tmp_path / f"{result.public_id}.json")
    with open(path) as f:
        record = json.load(f)
    assert record["publicKey"] == result.public_id
    assert record["prefix"] == "A"


def test_sink_close(tmp_path, result):
    sink = JsonFileSink(str(tmp_path))
    sink.close()
    sink.close()
    assert sink.closed
    with pytest.raises(RuntimeError):
        sink.save(result, SearchPattern(prefix="A"))

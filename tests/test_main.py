import json
import os

import config
import main


def test_outline_request_from_config():
    request = main.outline_request_from_config()
    assert request.topic == config.BOOK_TOPIC
    assert request.length == config.BOOK_LENGTH


def test_exports_outline_file_without_generation(outline, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(main, "setup_fonts", lambda: False)
    outline_path = tmp_path / "outline.json"
    outline_path.write_text(json.dumps(outline.model_dump(by_alias=True)), encoding="utf-8")

    assert main.main(["--outline", str(outline_path), "--skip-chapters", "--output-dir", str(tmp_path / "out")]) == 0
    assert os.listdir(tmp_path / "out") == ["the-quiet-tide.pdf"]


def test_bad_outline_file_exits_nonzero(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(main, "setup_fonts", lambda: False)
    bad = tmp_path / "outline.json"
    bad.write_text(json.dumps({"title": "A", "genre": "B", "chapters": []}), encoding="utf-8")
    assert main.main(["--outline", str(bad), "--output-dir", str(tmp_path / "out")]) == 1
    assert not (tmp_path / "out").exists()

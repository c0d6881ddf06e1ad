"""CLI commands and the results writer."""

import csv
import json

from PIL import Image

import main
from pantry_vision.cli.detect import format_result_row, iter_image_paths, run_detection
from pantry_vision.core.pipeline import IngredientPipeline
from pantry_vision.io.results_writer import ResultsWriter
from pantry_vision.utils.config import load_config


def _read_csv(path):
    with path.open(newline="", encoding="utf-8") as handle:
        return list(csv.DictReader(handle))


class TestHelpers:
    def test_iter_image_paths_filters_and_sorts(self, tmp_path):
        for name in ["b.JPG", "a.png", "notes.txt"]:
            (tmp_path / name).write_bytes(b"")
        found = [p.name for p in iter_image_paths(tmp_path, {".jpg", ".png"})]
        assert found == ["a.png", "b.JPG"]

    def test_format_result_row(self):
        row = format_result_row(1, {"name": "tomato", "score": 0.9, "sources": ["object", "tag"]})
        assert row.startswith(" 1 | tomato")
        assert row.endswith("0.90 | object,tag")


class TestResultsWriter:
    def test_json_and_csv(self, tmp_path):
        writer = ResultsWriter(tmp_path / "out")
        items = [{"name": "kiwi", "score": 0.9, "sources": ["tag"], "boundingBox": {"x": 1, "y": 2, "w": 3, "h": 4}}]
        path = writer.write_results(tmp_path / "fruit.jpg", items)
        assert json.loads(path.read_text())["ingredients"][0]["name"] == "kiwi"

        writer.write_top_picks_csv(tmp_path / "fruit.jpg", items)
        writer.write_top_picks_csv(tmp_path / "empty.jpg", [])
        rows = _read_csv(tmp_path / "out" / "top_picks.csv")
        assert rows[0]["ingredient"] == "kiwi" and rows[0]["box_w"] == "3"
        assert rows[1]["image"] == "empty.jpg" and rows[1]["ingredient"] == ""


class TestRunDetection:
    def test_writes_results_for_each_image(self, tmp_path, response, fake_vision, monkeypatch):
        monkeypatch.chdir(tmp_path)
        images = tmp_path / "photos"
        images.mkdir()
        Image.new("RGB", (20, 20)).save(images / "milk.jpg")
        vision = fake_vision({str(images / "milk.jpg"): response(tags=[("milk", 0.9)])})
        cfg = load_config()
        cfg["io"]["results_dir"] = str(tmp_path / "results")

        pipeline = IngredientPipeline.from_config(cfg, analyze=vision.analyze, crop=vision.crop)
        failures = run_detection(images, cfg, pipeline=pipeline)

        assert failures == 0
        payload = json.loads((tmp_path / "results" / "milk.json").read_text())
        assert payload["ingredients"][0]["name"] == "milk"


class TestMain:
    def test_pick_best_mode(self, tmp_path, response, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        saved = tmp_path / "chicken.json"
        saved.write_text(json.dumps(response(tags=[("chicken", 0.92), ("meat", 0.8)])))

        code = main.main(["--pick-best", str(saved), "--results-dir", str(tmp_path / "out")])

        assert code == 0
        assert "chicken.json: chicken" in capsys.readouterr().out
        assert _read_csv(tmp_path / "out" / "best_one.csv") == [{"response": "chicken.json", "ingredient": "chicken"}]

    def test_missing_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert main.main([str(tmp_path / "nowhere")]) == 1

    def test_apply_overrides(self):
        args = main.parse_args(["--no-refine", "--results-dir", "elsewhere"])
        cfg = main.apply_overrides({"refinement": {"enabled": True}}, args)
        assert cfg["refinement"]["enabled"] is False
        assert cfg["io"]["results_dir"] == "elsewhere"

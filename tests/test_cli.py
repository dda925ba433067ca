# -*- coding: utf-8 -*-
"""Tests for the carbontrend command line."""

import json

import pytest
import yaml
from typer.testing import CliRunner

from carbontrend import __version__
from carbontrend.cli import app

runner = CliRunner()


@pytest.fixture
def entity_file(tmp_path, entity_payload):
    path = tmp_path / "company.json"
    path.write_text(json.dumps(entity_payload), encoding="utf-8")
    return path


def run_json(*args):
    result = runner.invoke(app, ["analyze", *map(str, args), "--json", "--current-year", "2024"])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


class TestAnalyzeCommand:
    """carbontrend analyze"""

    def test_entity_json_output(self, entity_file):
        report = run_json(entity_file)

        assert report["entity_id"] == "Q42"
        assert report["current_year"] == 2024
        assert report["analysis"]["method"] == "linear"
        assert report["paris"]["status"] == "under_budget"
        assert report["projection"][0]["year"] == 2022

    def test_yaml_input(self, tmp_path, entity_payload):
        path = tmp_path / "company.yaml"
        path.write_text(yaml.safe_dump(entity_payload), encoding="utf-8")
        assert run_json(path)["entity_name"] == "Example AB"

    def test_point_list_input(self, tmp_path):
        path = tmp_path / "plant.json"
        path.write_text(json.dumps([
            {"year": 2018, "value": 100}, {"year": 2019, "value": 90},
            {"year": 2020, "value": 80}, {"year": 2021, "value": 70},
            {"year": 2022, "value": 60},
        ]), encoding="utf-8")
        report = run_json(path)
        assert report["entity_id"] == "plant"
        assert report["analysis"]["trend_slope"] == pytest.approx(-10.0)

    def test_period_list_input(self, tmp_path, entity_payload):
        path = tmp_path / "periods.json"
        path.write_text(json.dumps(entity_payload["reportingPeriods"]), encoding="utf-8")
        report = run_json(path)
        assert report["entity_name"] == "periods"
        assert report["analysis"]["data_points"] == 5

    def test_base_year_override(self, entity_file):
        report = run_json(entity_file, "--base-year", "2020")
        assert report["analysis"]["base_year"] == 2020
        assert report["analysis"]["data_points"] == 3

    def test_horizon(self, entity_file):
        report = run_json(entity_file, "--horizon", "2030")
        assert report["projection"][-1]["year"] == 2030

    def test_batch_returns_list(self, tmp_path, entity_payload):
        other = dict(entity_payload, wikidataId="Q43", name="Other AB")
        path = tmp_path / "companies.json"
        path.write_text(json.dumps([entity_payload, other]), encoding="utf-8")

        reports = run_json(path)
        assert [r["entity_id"] for r in reports] == ["Q42", "Q43"]

    def test_table_output(self, entity_file):
        result = runner.invoke(app, ["analyze", str(entity_file), "--current-year", "2024"])
        assert result.exit_code == 0
        assert "Example AB" in result.stdout
        assert "Carbon budget" in result.stdout

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_directory_argument(self, tmp_path):
        folder = tmp_path / "inputs.json"
        folder.mkdir()
        result = runner.invoke(app, ["analyze", str(folder)])
        assert result.exit_code == 1
        assert "not a file" in result.stdout

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "periods.csv"
        path.write_text("year,value\n2020,1\n", encoding="utf-8")
        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1

    def test_unparsable_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1

    def test_scalar_input_is_rejected(self, tmp_path):
        path = tmp_path / "scalar.json"
        path.write_text("42", encoding="utf-8")
        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1

    def test_horizon_beyond_2050_is_rejected(self, entity_file):
        result = runner.invoke(app, ["analyze", str(entity_file), "--horizon", "2060"])
        assert result.exit_code == 1


class TestVersionCommand:
    """carbontrend version"""

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

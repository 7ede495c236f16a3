import json
from datetime import date
from pathlib import Path

import pytest

from jorei_crawler.config import DEFAULT_BASE_URL, CrawlConfig, load_config
from jorei_crawler.errors import ConfigError


class TestCrawlConfig:
    def test_defaults(self):
        config = CrawlConfig.from_dict({"output_dir": "out", "index_path": "index.jsonl"})
        assert config.output_dir == Path("out")
        assert config.index_path == Path("index.jsonl")
        assert config.rows == 50
        assert config.sleep_time_ms == 500
        assert config.sleep_seconds == 0.5
        assert config.start_date is None and config.end_date is None
        assert config.base_url == DEFAULT_BASE_URL
        assert config.verify_tls is False

    def test_year_bounds(self):
        config = CrawlConfig.from_dict(
            {"output_dir": "out", "index_path": "i", "start_date": "2020", "end_date": 2021}
        )
        assert config.start_date == date(2020, 1, 1)
        assert config.end_date == date(2021, 12, 31)

    def test_is_immutable(self):
        config = CrawlConfig(output_dir=Path("out"), index_path=Path("i"))
        with pytest.raises(AttributeError):
            config.rows = 10

    @pytest.mark.parametrize(
        "overrides",
        [
            {"rows": 0},
            {"rows": "many"},
            {"sleep_time_ms": -1},
            {"start_date": "2022-02-01", "end_date": "2022-01-01"},
            {"start_date": "not a date"},
            {"start_date": "1"},
            {"verify_tls": "false"},
            {"show_progress": 1},
        ],
    )
    def test_invalid_values(self, overrides):
        data = {"output_dir": "out", "index_path": "i", **overrides}
        with pytest.raises(ConfigError):
            CrawlConfig.from_dict(data)

    def test_missing_required(self):
        with pytest.raises(ConfigError, match="output_dir"):
            CrawlConfig.from_dict({"index_path": "i"})

    def test_load_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "output_dir": "data/out",
                    "index_path": "data/index.jsonl",
                    "rows": 10,
                    "sleep_time_ms": 0,
                    "base_url": "https://example.invalid/",
                }
            ),
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.rows == 10
        assert config.sleep_seconds == 0
        assert config.base_url == "https://example.invalid"

    def test_date_outside_utc_range(self):
        with pytest.raises(ConfigError, match="UTC"):
            CrawlConfig(output_dir=Path("out"), index_path=Path("i"), start_date=date(1, 1, 1))

    def test_extreme_but_valid_dates(self):
        config = CrawlConfig(
            output_dir=Path("out"),
            index_path=Path("i"),
            start_date=date(1, 1, 2),
            end_date=date(9999, 12, 31),
        )
        assert config.end_date == date(9999, 12, 31)

    def test_boolean_flags(self):
        config = CrawlConfig.from_dict(
            {"output_dir": "out", "index_path": "i", "verify_tls": True, "show_progress": False}
        )
        assert config.verify_tls is True
        assert config.show_progress is False


class TestLoadConfig:
    def test_overrides_win(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"output_dir": "a", "index_path": "i", "rows": 5}), encoding="utf-8")
        config = load_config(path, {"output_dir": "b"})
        assert config.output_dir == Path("b")
        assert config.rows == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="cannot read config"):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ConfigError, match="JSON object"):
            load_config(path)

"""
tests/test_config.py — YAML Configuration Loader
=================================================
"""

from __future__ import annotations

import dataclasses

import pytest

from farmwise.config import FarmwiseConfig, load_config


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        cfg = load_config(tmp_path / "absent.yaml")
        assert cfg == FarmwiseConfig()
        assert cfg.otp_ttl_minutes == 10
        assert cfg.verification_bonus_points == 50
        assert cfg.points_per_level == 1000

    def test_reads_known_keys(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "app_name: FarmWise Staging\n"
            "otp_ttl_minutes: 5\n"
            "verification_bonus_points: '75'\n",
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.app_name == "FarmWise Staging"
        assert cfg.otp_ttl_minutes == 5
        assert cfg.verification_bonus_points == 75

    def test_unknown_keys_ignored(self, tmp_path, caplog):
        path = tmp_path / "config.yaml"
        path.write_text("otp_tll_minutes: 3\n", encoding="utf-8")
        cfg = load_config(path)
        assert cfg.otp_ttl_minutes == 10
        assert "otp_tll_minutes" in caplog.text

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == FarmwiseConfig()

    def test_bad_value_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("points_per_level: lots\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)

    @pytest.mark.parametrize("key", [
        "otp_ttl_minutes",
        "verification_bonus_points",
        "points_per_level",
        "default_page_size",
    ])
    @pytest.mark.parametrize("value", [0, -5])
    def test_counts_below_one_rejected(self, tmp_path, key, value):
        path = tmp_path / "config.yaml"
        path.write_text(f"{key}: {value}\n", encoding="utf-8")
        with pytest.raises(ValueError, match=key):
            load_config(path)

    def test_bonus_of_one_accepted(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("verification_bonus_points: 1\npoints_per_level: 1\n", encoding="utf-8")
        cfg = load_config(path)
        assert cfg.verification_bonus_points == 1
        assert cfg.points_per_level == 1

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            FarmwiseConfig().app_name = "Other"

"""Tests for loading Settings from the environment."""

import pytest
from pydantic import ValidationError

from api.config import Settings
from privacyguard.models.entities import RedactionStyle


class TestRedactionStyleSetting:
    def test_defaults_to_placeholder(self):
        assert Settings().redaction_style is RedactionStyle.PLACEHOLDER

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("REDACTION_STYLE", "mask")
        settings = Settings()
        assert settings.redaction_style is RedactionStyle.MASK
        assert settings.pipeline_kwargs()["redaction_style"] == "mask"

    def test_unknown_style_rejected_at_load(self, monkeypatch):
        monkeypatch.setenv("REDACTION_STYLE", "blur-everything")
        with pytest.raises(ValidationError):
            Settings()

    def test_request_style_overrides_setting(self):
        assert Settings().pipeline_kwargs("mask")["redaction_style"] == "mask"


class TestListSettings:
    def test_comma_separated_values_are_split(self, monkeypatch):
        monkeypatch.setenv("NATIONAL_ID_CATEGORIES", "Aadhaar Number, PAN ,")
        assert Settings().national_id_categories_list == ["Aadhaar Number", "PAN"]

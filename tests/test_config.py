"""Tests for engine configuration."""

import pytest

from chess_study.config import EngineConfig


class TestEngineConfig:
    """Test EngineConfig validation."""

    def test_defaults(self):
        config = EngineConfig()

        assert config.auto_advance is True
        assert config.export_main_line_only is False
        assert config.alternate_credit == 0.5
        assert config.hint_penalty == 0.25
        assert config.max_import_plies == 2000

    @pytest.mark.parametrize("credit", [-0.1, 1.5])
    def test_alternate_credit_range(self, credit):
        with pytest.raises(ValueError, match="alternate_credit"):
            EngineConfig(alternate_credit=credit)

    def test_negative_hint_penalty(self):
        with pytest.raises(ValueError, match="hint_penalty"):
            EngineConfig(hint_penalty=-1)

    def test_max_import_plies_positive(self):
        with pytest.raises(ValueError, match="max_import_plies"):
            EngineConfig(max_import_plies=0)

    def test_repr(self):
        assert "auto_advance=False" in repr(EngineConfig(auto_advance=False))

    def test_max_import_plies_applied(self):
        from chess_study import ParseError, StudyEngine

        engine = StudyEngine(config=EngineConfig(max_import_plies=2))

        with pytest.raises(ParseError):
            engine.import_record("1. e4 e5 2. Nf3")

"""Test configuration loading."""

from genpinout.config import GenPinoutConfig, _flatten_yaml


def test_default_config():
    config = GenPinoutConfig()
    assert config.log_level == "INFO"
    assert config.default_page == "A4-L"
    assert config.default_dpi == 300
    assert config.output_dir == "svg"
    assert config.font_metrics == "heuristic"
    assert config.font_paths == {}


def test_from_yaml(tmp_path):
    path = tmp_path / "genpinout.yaml"
    path.write_text(
        "genpinout:\n"
        "  default_page: A3-P\n"
        "  default_dpi: 150\n"
        "  font_metrics: pillow\n"
        "  font_paths:\n"
        "    Roboto: /fonts/Roboto-Regular.ttf\n",
        encoding="utf-8",
    )
    config = GenPinoutConfig.from_yaml(path)
    assert config.default_page == "A3-P"
    assert config.default_dpi == 150
    assert config.font_metrics == "pillow"
    assert config.font_paths == {"Roboto": "/fonts/Roboto-Regular.ttf"}


def test_missing_yaml_gives_defaults(tmp_path):
    config = GenPinoutConfig.from_yaml(tmp_path / "absent.yaml")
    assert config.default_dpi == 300


def test_env_override(monkeypatch):
    monkeypatch.setenv("GENPINOUT_OUTPUT_DIR", "out")
    monkeypatch.setenv("GENPINOUT_DEFAULT_DPI", "600")
    config = GenPinoutConfig()
    assert config.output_dir == "out"
    assert config.default_dpi == 600


def test_flatten_yaml_keeps_font_paths():
    flat = _flatten_yaml({"page": {"size": "A4-L"}, "font_paths": {"Lato": "lato.ttf"}})
    assert flat == {"page_size": "A4-L", "font_paths": {"Lato": "lato.ttf"}}


def test_yaml_wins_over_env(tmp_path, monkeypatch):
    monkeypatch.setenv("GENPINOUT_OUTPUT_DIR", "env")
    monkeypatch.setenv("GENPINOUT_DEFAULT_DPI", "600")
    path = tmp_path / "genpinout.yaml"
    path.write_text("genpinout:\n  output_dir: yaml\n", encoding="utf-8")
    config = GenPinoutConfig.from_yaml(path)
    assert config.output_dir == "yaml"
    assert config.default_dpi == 600

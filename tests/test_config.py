from tsunravel.config import CONFIG_FILE, Config, load_config


class TestLoadConfig:
    def test_defaults_without_files(self, tmp_path):
        assert load_config(tmp_path) == Config()

    def test_dedicated_file_wins(self, tmp_path):
        (tmp_path / CONFIG_FILE).write_text(
            '[tsunravel]\nindex = "gen/index.ts"\nexclude = ["legacy/*"]\n'
        )
        (tmp_path / "pyproject.toml").write_text('[tool.tsunravel]\nindex = "other.ts"\n')
        config = load_config(tmp_path)
        assert config.index == str(tmp_path / "gen/index.ts")
        assert config.exclude == ["legacy/*"]

    def test_pyproject_fallback(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(
            "[tool.tsunravel]\n"
            'entry = "main.ts"\n'
            'patterns = "*.tsx"\n'
            'dist-path = "assets/index.js"\n'
        )
        config = load_config(tmp_path)
        assert config.entry == str(tmp_path / "main.ts")
        assert config.patterns == ["*.tsx"]
        assert config.dist_path == "assets/index.js"
        assert config.index is None

    def test_malformed_file_ignored(self, tmp_path, caplog):
        (tmp_path / CONFIG_FILE).write_text("[tsunravel\nindex = ")
        assert load_config(tmp_path) == Config()
        assert "ignoring unreadable config" in caplog.text

    def test_unknown_keys_ignored(self, tmp_path):
        (tmp_path / CONFIG_FILE).write_text('[tsunravel]\ncolour = "blue"\nindex = "i.ts"\n')
        assert load_config(tmp_path).index == str(tmp_path / "i.ts")

    def test_pyproject_without_table(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
        assert load_config(tmp_path) == Config()

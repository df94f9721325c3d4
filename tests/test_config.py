from pathlib import Path

import pytest

from kbarchive.config import DEFAULT_COMMAND, ConfigError, load_config, parse_config


def test_defaults_when_no_config(tmp_path: Path):
    config = load_config(tmp_path)

    assert config.source is None
    assert config.content == "content"
    assert config.generator.command == DEFAULT_COMMAND
    assert config.content_path == (tmp_path / "content").resolve()


def test_kbarchive_toml_found_walking_up(tmp_path: Path):
    (tmp_path / "kbarchive.toml").write_text(
        "\n".join(
            [
                'content = "notes"',
                'fail_on = "warning"',
                "",
                "[generator]",
                'command = ["mkdocs", "build", "-d", "{output}"]',
                'output = "site"',
                "port = 9000",
                "",
                "[rules]",
                'disabled = ["orphan-note"]',
                "",
                "[rules.severity]",
                'broken-link = "error"',
                "",
            ]
        ),
        encoding="utf-8",
    )
    nested = tmp_path / "notes" / "deep"
    nested.mkdir(parents=True)

    config = load_config(nested)

    assert config.source == tmp_path.resolve() / "kbarchive.toml"
    assert config.root == tmp_path.resolve()
    assert config.content == "notes"
    assert config.fail_on == "warning"
    assert config.generator.command == ["mkdocs", "build", "-d", "{output}"]
    assert config.generator.output == "site"
    assert config.generator.port == 9000
    assert config.disabled_rules == ["orphan-note"]
    assert config.severity == {"broken-link": "error"}


def test_pyproject_tool_table(tmp_path: Path):
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "notes"\n\n[tool.kbarchive]\ncontent = "docs"\n',
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.source == tmp_path.resolve() / "pyproject.toml"
    assert config.content == "docs"


def test_pyproject_without_table_is_skipped(tmp_path: Path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "other"\n', encoding="utf-8")

    assert load_config(tmp_path).source is None


@pytest.mark.parametrize(
    "data, message",
    [
        ({"fail_on": "info"}, "fail_on"),
        ({"rules": {"severity": {"broken-link": "fatal"}}}, "Unknown level"),
        ({"ignore": "private"}, "'ignore'"),
        ({"generator": {"command": []}}, "must not be empty"),
        ({"generator": {"port": "8080"}}, "port"),
    ],
)
def test_invalid_values_raise(tmp_path: Path, data: dict, message: str):
    with pytest.raises(ConfigError, match=message):
        parse_config(data, root=tmp_path)


def test_invalid_toml_raises_config_error(tmp_path: Path):
    (tmp_path / "kbarchive.toml").write_text("content = [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(tmp_path)

"""Tests for stylekit CLI commands."""

import textwrap

import pytest
from click.testing import CliRunner

from stylekit.cli.main import cli


THEME = textwrap.dedent("""
    base: &base
      size: 12
      tint: "!!color(#336699)"
    title:
      <<: *base
      size:
        "${default}": 18
        "${idiom == iPad}": 28
      font: "!!font(system, ${idiom == iPad ? 20 : 14})"
      label: Welcome
      gutter: "${spacing * 2}"
""")


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.delenv("STYLEKIT_IDIOM", raising=False)
    monkeypatch.delenv("STYLEKIT_LOG_LEVEL", raising=False)
    return CliRunner()


@pytest.fixture
def theme(tmp_path):
    path = tmp_path / "theme.yaml"
    path.write_text(THEME)
    return path


class TestCheck:
    def test_lists_styles(self, runner, theme):
        result = runner.invoke(cli, ["check", str(theme)])

        assert result.exit_code == 0
        assert "base (2 rules)" in result.output
        assert "title (5 rules)" in result.output
        assert "  size: number, conditional" in result.output
        assert "  tint: color" in result.output
        assert "2 style(s) loaded" in result.output

    def test_malformed_document(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- just\n- a list\n")

        result = runner.invoke(cli, ["check", str(path)])

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["check", str(tmp_path / "missing.yaml")])

        assert result.exit_code != 0


class TestGet:
    def test_resolves_by_kind(self, runner, theme):
        result = runner.invoke(cli, ["get", str(theme), "title", "label"])

        assert result.exit_code == 0
        assert result.output.strip() == "Welcome"

    def test_conditional_follows_idiom(self, runner, theme):
        phone = runner.invoke(cli, ["get", str(theme), "title", "size", "--as", "integer"])
        ipad = runner.invoke(
            cli, ["get", str(theme), "title", "size", "--as", "integer", "--idiom", "iPad"]
        )

        assert phone.output.strip() == "18"
        assert ipad.output.strip() == "28"

    def test_font_size_evaluated_at_load(self, runner, theme):
        result = runner.invoke(cli, ["get", str(theme), "title", "font", "--idiom", "iPad"])

        assert result.output.strip() == "system 20pt"

    def test_inherited_color(self, runner, theme):
        result = runner.invoke(cli, ["get", str(theme), "title", "tint"])

        assert result.output.strip() == "#336699"

    def test_variables(self, runner, theme):
        result = runner.invoke(
            cli, ["get", str(theme), "title", "gutter", "--var", "spacing=4"]
        )

        assert result.exit_code == 0
        assert result.output.strip() == "8.0"

    def test_type_mismatch_reported(self, runner, theme):
        result = runner.invoke(cli, ["get", str(theme), "title", "label", "--as", "float"])

        assert result.exit_code == 0
        assert "TYPE_MISMATCH" in result.output

    def test_unknown_rule(self, runner, theme):
        result = runner.invoke(cli, ["get", str(theme), "title", "nope"])

        assert result.exit_code == 1
        assert "no rule 'nope'" in result.output

    def test_bad_variable(self, runner, theme):
        result = runner.invoke(
            cli, ["get", str(theme), "title", "gutter", "--var", "spacing"]
        )

        assert result.exit_code == 2


class TestEval:
    def test_constant(self, runner):
        result = runner.invoke(cli, ["eval", "iPhoneX.width / 5"])

        assert result.exit_code == 0
        assert result.output.strip() == "75"

    def test_environment_option(self, runner):
        result = runner.invoke(cli, ["eval", "idiom == iPad", "--idiom", "iPad"])

        assert result.output.strip() == "1"

    def test_environment_from_config(self, runner, monkeypatch):
        monkeypatch.setenv("STYLEKIT_IDIOM", "tv")

        result = runner.invoke(cli, ["eval", "idiom == tv ? 3 : 4"])

        assert result.output.strip() == "3"

    def test_failure_exits_nonzero(self, runner):
        result = runner.invoke(cli, ["eval", "undefinedThing + 1"])

        assert result.exit_code == 1
        assert "0" in result.output.splitlines()
        assert "EVALUATION_FAILED" in result.output


class TestFunctions:
    def test_lists_registry(self, runner):
        result = runner.invoke(cli, ["functions"])

        assert result.exit_code == 0
        assert "abs (1 args): Returns absolute value" in result.output
        assert "max (1+ args): Returns maximum value" in result.output
        assert "round (1-2 args)" in result.output
        assert "    max(12, iPhoneSE.width / 20)" in result.output

"""Tests für die Kommandozeile (main.py)."""

import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from config.manager import ConfigManager
from config.schema import Weekday
from main import cli, main
from models.school_class import ClassConfig
from models.school_data import PlanningData
from models.subject import SubjectRequirement
from solver.scheduler import GenerationResult

WEEK = [Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI]


def _pair_class(name: str, partner: str) -> ClassConfig:
    return ClassConfig(
        name=name, active_days=WEEK, periods_per_day=4, lunch_after=2,
        subjects=[
            SubjectRequirement(name="DBMS", periods_per_week=4, teacher="Dr. Rao",
                               combine=True, combine_with=[partner]),
            SubjectRequirement(name="Mathematics", code="MATHS", periods_per_week=5),
            SubjectRequirement(name="Physics", code="PHY", periods_per_week=5),
            SubjectRequirement(name="English", code="ENG", periods_per_week=5),
            SubjectRequirement(name="Games", code="GAMES", periods_per_week=1, teacher="Coach Das"),
        ],
    )


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    data = PlanningData(classes=[_pair_class("CSE-A", "CSE-B"), _pair_class("CSE-B", "CSE-A")])
    path = tmp_path / "daten.yaml"
    ConfigManager().save_planning_data(data, path)
    return path


@pytest.fixture
def plan_file(data_file: Path, tmp_path: Path) -> Path:
    path = tmp_path / "plan.json"
    result = CliRunner().invoke(cli, ["generate", str(data_file), "-o", str(path), "--seed", "5"])
    assert result.exit_code == 0, result.output
    return path


class TestCli:
    def test_help(self):
        """--help gibt Usage aus."""
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    @pytest.mark.parametrize("command", ["init", "demo", "check", "generate", "show", "swap"])
    def test_commands_registered(self, command):
        result = CliRunner().invoke(cli, [command, "--help"])
        assert result.exit_code == 0

    def test_init_creates_config_once(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            first = runner.invoke(cli, ["init"])
            assert first.exit_code == 0
            assert Path("config/engine_config.yaml").exists()

            second = runner.invoke(cli, ["init"])
            assert second.exit_code == 1
            assert "existiert bereits" in second.output

            forced = runner.invoke(cli, ["init", "--force"])
            assert forced.exit_code == 0

    def test_demo_and_check(self, tmp_path: Path):
        runner = CliRunner()
        path = tmp_path / "demo.yaml"
        result = runner.invoke(cli, ["demo", "-o", str(path), "--seed", "1"])
        assert result.exit_code == 0
        assert path.exists()

        check = runner.invoke(cli, ["check", str(path)])
        assert check.exit_code == 0
        assert "LÖSBAR" in check.output

    def test_check_missing_file(self, tmp_path: Path):
        result = CliRunner().invoke(cli, ["check", str(tmp_path / "fehlt.yaml")])
        assert result.exit_code == 1
        assert "Fehler" in result.output

    def test_check_infeasible_exit_code(self, tmp_path: Path):
        cls = _pair_class("CSE-A", "CSE-B").model_copy(update={"periods_per_day": 5})
        path = tmp_path / "daten.json"
        ConfigManager().save_planning_data(PlanningData(classes=[cls]), path)
        result = CliRunner().invoke(cli, ["check", str(path)])
        assert result.exit_code == 1

    def test_generate_writes_result(self, plan_file: Path):
        result = GenerationResult.load_json(plan_file)
        assert not result.needs_regeneration
        assert [c.name for c in result.classes] == ["CSE-A", "CSE-B"]
        assert result.get_teacher("Dr. Rao") is not None

    def test_show_class_and_teacher(self, plan_file: Path):
        runner = CliRunner()
        assert runner.invoke(cli, ["show", str(plan_file), "--class", "CSE-A"]).exit_code == 0
        assert runner.invoke(cli, ["show", str(plan_file), "--teacher", "Dr. Rao"]).exit_code == 0

    def test_show_unknown_class(self, plan_file: Path):
        result = CliRunner().invoke(cli, ["show", str(plan_file), "--class", "CSE-Z"])
        assert result.exit_code == 1
        assert "nicht gefunden" in result.output

    def test_swap_accepted_updates_file(self, plan_file: Path, data_file: Path):
        """Freitag P1 ↔ P4 in CSE-A: keine gemeinsame Stunde betroffen."""
        before = GenerationResult.load_json(plan_file).get_class("CSE-A").grid
        result = CliRunner().invoke(cli, [
            "swap", str(plan_file), str(data_file),
            "--class", "CSE-A", "--from", "Fri:1", "--to", "Fri:5",
        ])
        assert result.exit_code == 0, result.output
        after = GenerationResult.load_json(plan_file).get_class("CSE-A").grid
        assert after.get(Weekday.FRI, 1) == before.get(Weekday.FRI, 4)
        assert after.get(Weekday.FRI, 4) == before.get(Weekday.FRI, 1)

    def test_swap_rejected(self, plan_file: Path, data_file: Path):
        result = CliRunner().invoke(cli, [
            "swap", str(plan_file), str(data_file),
            "--class", "CSE-A", "--from", "Mon:3", "--to", "Mon:1",
        ])
        assert result.exit_code == 1
        assert "abgelehnt" in result.output

    def test_swap_invalid_cell(self, plan_file: Path, data_file: Path):
        result = CliRunner().invoke(cli, [
            "swap", str(plan_file), str(data_file),
            "--class", "CSE-A", "--from", "Mon", "--to", "Mon:1",
        ])
        assert result.exit_code == 1
        assert "Fehler" in result.output

    def test_main_welcome_on_first_run(self, tmp_path: Path, monkeypatch, capsys):
        """Ohne Engine-Config und ohne Argumente erscheint der Willkommenshinweis."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(sys, "argv", ["kollegplan"])
        with pytest.raises(SystemExit):
            main()
        assert "Willkommen" in capsys.readouterr().out

    def test_main_no_welcome_with_config(self, tmp_path: Path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        assert CliRunner().invoke(cli, ["init"]).exit_code == 0
        monkeypatch.setattr(sys, "argv", ["kollegplan"])
        with pytest.raises(SystemExit):
            main()
        assert "Willkommen" not in capsys.readouterr().out

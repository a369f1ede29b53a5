from typer.testing import CliRunner

from lda_walkthrough.data import LDA_Dataset
from lda_walkthrough.walkthrough import app

runner = CliRunner()


def test_list():
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "basic" in result.stdout
    assert "multi_group" in result.stdout


def test_run_selected_cases(tmp_path):
    result = runner.invoke(app, ["run", "basic", "constant", "--no-plots", "--reports-dir", str(tmp_path)])
    assert result.exit_code == 0
    assert "[basic] accuracy" in result.stdout
    assert "[constant] LDA fit failed" in result.stdout
    assert (tmp_path / "basic" / "results.txt").exists()


def test_run_unknown_case(tmp_path):
    result = runner.invoke(app, ["run", "nope", "--reports-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "Unknown case" in result.stdout


def test_generate(tmp_path):
    out = tmp_path / "groups.pt"
    result = runner.invoke(app, ["generate", str(out), "--groups", "3", "--n-per-group", "10"])
    assert result.exit_code == 0
    dataset = LDA_Dataset.load(out)
    assert len(dataset) == 30
    assert dataset.groups == ["A", "B", "C"]

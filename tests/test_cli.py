import json

import matplotlib.pyplot as plt
import pytest
from pydantic import ValidationError

from cluster_analysis.cli import main
from cluster_analysis.settings import LOG_LEVEL_ENV, ClusteringSettings


def test_cli_average_two_clusters(diagonal_file, capsys):
    assert main([str(diagonal_file), "2"]) == 0
    out = capsys.readouterr().out
    assert out == (
        "Clusters:\n"
        "cluster 0: 1[1,1] 2[2,2] 3[3,3]\n"
        "cluster 1: 4[10,10]\n"
    )


def test_cli_defaults_to_single_cluster(diagonal_file, capsys):
    assert main([str(diagonal_file)]) == 0
    out = capsys.readouterr().out
    assert out == "Clusters:\ncluster 0: 1[1,1] 2[2,2] 3[3,3] 4[10,10]\n"


@pytest.mark.parametrize("flag", ["--avg", "--min", "--max"])
def test_cli_linkage_flags(diagonal_file, capsys, flag):
    assert main([str(diagonal_file), "2", flag]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[1:] == ["cluster 0: 1[1,1] 2[2,2] 3[3,3]", "cluster 1: 4[10,10]"]


def test_cli_target_equals_count_keeps_input_order(write_input, capsys):
    path = write_input("count=3\n9 0.5 7\n3 100 200\n5 1 1\n")
    assert main([str(path), "3", "--min"]) == 0
    assert capsys.readouterr().out == (
        "Clusters:\n"
        "cluster 0: 9[0.5,7]\n"
        "cluster 1: 3[100,200]\n"
        "cluster 2: 5[1,1]\n"
    )


def test_cli_rejects_too_many_clusters(diagonal_file, capsys):
    assert main([str(diagonal_file), "5"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error:" in captured.err


@pytest.mark.parametrize("n_clusters", ["0", "-2"])
def test_cli_rejects_non_positive_count(diagonal_file, capsys, n_clusters):
    assert main([str(diagonal_file), n_clusters]) == 1
    assert "Invalid argument" in capsys.readouterr().err


def test_cli_rejects_non_numeric_count(diagonal_file):
    with pytest.raises(SystemExit) as excinfo:
        main([str(diagonal_file), "two"])
    assert excinfo.value.code == 2


def test_cli_rejects_two_methods(diagonal_file):
    with pytest.raises(SystemExit) as excinfo:
        main([str(diagonal_file), "2", "--min", "--max"])
    assert excinfo.value.code != 0


def test_cli_rejects_bad_log_level_from_env(diagonal_file, capsys, monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "bogus")
    assert main([str(diagonal_file), "2"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Invalid argument" in captured.err


def test_cli_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.txt"), "1"]) == 1
    assert "Cannot read file" in capsys.readouterr().err


def test_cli_malformed_file(write_input, capsys):
    path = write_input("count=2\n1 1 1\n")
    assert main([str(path)]) == 1
    assert "Declared count=2" in capsys.readouterr().err


def test_cli_json_logging(diagonal_file, capsys):
    assert main([str(diagonal_file), "2", "--log-level", "debug", "--log-format", "json"]) == 0
    captured = capsys.readouterr()
    events = [json.loads(line) for line in captured.err.splitlines() if line.startswith("{")]
    names = [event["event"] for event in events]
    assert "clustering_started" in names
    assert names.count("clusters_merged") == 2
    assert "clustering_finished" in names
    assert captured.out.startswith("Clusters:\n")


def test_cli_plot(diagonal_file, capsys, monkeypatch):
    shown = []
    monkeypatch.setattr(plt, "show", lambda: shown.append(plt.gcf()))
    assert main([str(diagonal_file), "2", "--plot"]) == 0
    assert len(shown) == 1
    assert len(shown[0].axes[0].collections) == 2
    plt.close("all")


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    settings = ClusteringSettings()
    assert settings.n_clusters == 1
    assert settings.linkage == "average"
    assert settings.log_level == "WARNING"
    assert settings.log_format == "console"
    assert settings.plot is False


def test_settings_log_level_from_env(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "info")
    assert ClusteringSettings().log_level == "INFO"


@pytest.mark.parametrize(
    "values",
    [
        {"n_clusters": 0},
        {"linkage": "ward"},
        {"log_level": "chatty"},
        {"log_format": "xml"},
    ],
)
def test_settings_validation(values):
    with pytest.raises(ValidationError):
        ClusteringSettings(**values)


def test_settings_validates_log_level_from_env(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "bogus")
    with pytest.raises(ValidationError):
        ClusteringSettings()

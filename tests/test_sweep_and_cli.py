import json

import pytest

from txbench.cli import run as run_cli
from txbench.cli import sweep as sweep_cli
from txbench.core.errors import ConfigurationError
from txbench.sweeps.batch_sweep import BatchSizeSweep


@pytest.mark.asyncio
async def test_sweep_runs_one_round_per_batch_size(make_submitter):
    submitter = make_submitter(fail_every=4)
    sweep = BatchSizeSweep(submitter, progress_interval=10)

    summaries = await sweep.run(batch_sizes=[1, 3, 7], transactions_per_round=8)

    assert [s.batch_size for s in summaries] == [1, 3, 7]
    assert all(s.total == 8 and s.failed == 2 for s in summaries)
    assert len(submitter.calls) == 24
    assert [len(json.loads(call[1])) for call in submitter.calls[:8]] == [1] * 8
    assert sweep.aggregator.results == summaries


@pytest.mark.asyncio
async def test_sweep_validates_every_round_before_starting(make_submitter):
    submitter = make_submitter()
    sweep = BatchSizeSweep(submitter)

    with pytest.raises(ConfigurationError):
        await sweep.run(batch_sizes=[5, 0], transactions_per_round=3)
    assert submitter.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"batch_sizes": [1], "transactions_per_round": 0},
        {"batch_sizes": [], "transactions_per_round": 3},
    ],
)
async def test_sweep_rejects_explicit_empty_values(make_submitter, kwargs):
    submitter = make_submitter()
    sweep = BatchSizeSweep(submitter)

    with pytest.raises(ConfigurationError):
        await sweep.run(**kwargs)
    assert submitter.calls == []


def test_parse_sizes():
    assert sweep_cli.parse_sizes("1, 5,10,") == [1, 5, 10]


def test_run_cli_dry_run(tmp_path, capsys):
    output = tmp_path / "summary.json"
    run_cli.main(
        [
            "--dry-run",
            "--transactions", "6",
            "--batch-size", "2",
            "--progress-interval", "3",
            "--seed", "7",
            "--output-json", str(output),
        ]
    )

    out = capsys.readouterr().out
    assert "BENCHMARK RESULTS" in out
    assert "Total Transactions:  6" in out
    assert json.loads(output.read_text())["total"] == 6


def test_run_cli_reads_config_file(tmp_path, capsys):
    config_path = tmp_path / "run.json"
    config_path.write_text(json.dumps({"transaction_count": 4, "batch_size": 1}))

    run_cli.main(["--dry-run", "--config", str(config_path)])

    assert "Total Transactions:  4" in capsys.readouterr().out


def test_run_cli_rejects_invalid_config(capsys):
    with pytest.raises(SystemExit) as excinfo:
        run_cli.main(["--dry-run", "--transactions", "0"])

    assert excinfo.value.code == 2
    assert "Configuration error" in capsys.readouterr().out


def test_run_cli_requires_target(monkeypatch, capsys):
    monkeypatch.delenv("TXBENCH_URL", raising=False)

    with pytest.raises(SystemExit) as excinfo:
        run_cli.main(["--url", "", "--transactions", "3"])

    assert excinfo.value.code == 2
    assert "--url" in capsys.readouterr().out


def test_sweep_cli_dry_run(tmp_path, capsys):
    csv_path = tmp_path / "sweep.csv"
    sweep_cli.main(
        [
            "--dry-run",
            "--batch-sizes", "1,2",
            "--transactions", "3",
            "--csv", str(csv_path),
        ]
    )

    out = capsys.readouterr().out
    assert "BATCH SIZE SWEEP RESULTS" in out
    assert csv_path.exists()


@pytest.mark.parametrize(
    "extra",
    [
        ["--transactions", "0"],
        ["--batch-sizes", ""],
    ],
)
def test_sweep_cli_rejects_empty_values(extra, capsys):
    with pytest.raises(SystemExit) as excinfo:
        sweep_cli.main(["--dry-run", "--batch-sizes", "1"] + extra)

    assert excinfo.value.code == 2
    assert "Configuration error" in capsys.readouterr().out


def test_run_cli_rejects_wrongly_typed_config_file(tmp_path, capsys):
    config_path = tmp_path / "run.json"
    config_path.write_text(json.dumps({"timeout_seconds": "30"}))

    with pytest.raises(SystemExit) as excinfo:
        run_cli.main(["--dry-run", "--config", str(config_path)])

    assert excinfo.value.code == 2
    assert "timeout_seconds" in capsys.readouterr().out

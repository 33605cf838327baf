import importlib.util
import json
import os

import pandas as pd
import pytest

SCRIPT = os.path.join(os.path.dirname(__file__), "..", "scripts", "run_day.py")


@pytest.fixture(scope="module")
def run_day():
    spec = importlib.util.spec_from_file_location("run_day", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_missing_columns_exit_cleanly(run_day, tmp_path):
    (tmp_path / "stops.csv").write_text("id,lat,lon\n1,52.5,-1.88\n")
    (tmp_path / "pois.csv").write_text("poi_id,name,category,lat,lon\n")
    with pytest.raises(SystemExit) as exc:
        run_day.main(["--data-dir", str(tmp_path), "--output-dir", str(tmp_path / "out")])
    assert exc.value.code == 1


def test_missing_data_dir_exits_cleanly(run_day, tmp_path):
    with pytest.raises(SystemExit) as exc:
        run_day.main(["--data-dir", str(tmp_path / "nowhere"), "--output-dir", str(tmp_path / "out")])
    assert exc.value.code == 1


def test_writes_results(run_day, tmp_path):
    out = tmp_path / "out"
    run_day.main(["--agents", "40", "--seed", "7", "--min-count", "1", "--output-dir", str(out)])

    metrics = pd.read_parquet(out / "metrics.parquet")
    assert metrics["minute"].iloc[0] == 360
    assert metrics["minute"].iloc[-1] == 360 + 960
    assert (out / "flow.parquet").exists()

    summary = json.loads((out / "summary.json").read_text())
    assert summary["config"] == {"agents": 40, "seed": 7}
    assert summary["baseline"]["minute"] == 360 + 960
    routes = json.loads((out / "routes.json").read_text())
    assert summary["proposal"]["routes_count"] == len(routes)

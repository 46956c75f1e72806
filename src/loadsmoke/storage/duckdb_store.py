from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path

import duckdb
import pandas as pd

from loadsmoke.config import HarnessSettings
from loadsmoke.metrics import ErrorBucket, MetricsAggregator, RunStatistics


@dataclass(slots=True)
class Storage:
    db_path: Path

    def __post_init__(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> duckdb.DuckDBPyConnection:
        return duckdb.connect(str(self.db_path))

    def _init_schema(self) -> None:
        with self._connect() as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS run_meta (
                    run_id TEXT PRIMARY KEY,
                    created_at TIMESTAMP,
                    config_json TEXT,
                    stats_json TEXT,
                    passed BOOLEAN
                );
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS status_codes (
                    run_id TEXT,
                    seq INTEGER,
                    status INTEGER,
                    occurrences BIGINT
                );
                """
            )
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS error_samples (
                    run_id TEXT,
                    bucket TEXT,
                    seq INTEGER,
                    status INTEGER,
                    message TEXT,
                    url TEXT
                );
                """
            )

    def run_exists(self, run_id: str) -> bool:
        with self._connect() as con:
            result = con.execute(
                "SELECT COUNT(*) FROM run_meta WHERE run_id = ?",
                [run_id],
            ).fetchone()
            return bool(result and result[0] > 0)

    def save_run(
        self,
        run_id: str,
        settings: HarnessSettings,
        stats: RunStatistics,
        aggregator: MetricsAggregator,
        passed: bool = True,
        created_at: datetime | None = None,
    ) -> None:
        if self.run_exists(run_id):
            msg = f"Run {run_id} already exists"
            raise ValueError(msg)
        created_at = created_at or datetime.now(timezone.utc).replace(tzinfo=None)
        config_json = json.dumps(settings.to_metadata())
        stats_json = json.dumps(asdict(stats))
        with self._connect() as con:
            con.execute(
                "INSERT INTO run_meta VALUES (?, ?, ?, ?, ?)",
                [run_id, created_at, config_json, stats_json, passed],
            )
            status_df = pd.DataFrame(
                [
                    {
                        "run_id": run_id,
                        "seq": seq,
                        "status": status,
                        "occurrences": aggregator.status_counts[status],
                    }
                    for seq, status in enumerate(aggregator.status_order)
                ]
            )
            if not status_df.empty:
                con.execute("INSERT INTO status_codes SELECT * FROM status_df")
            samples_df = pd.DataFrame(
                [
                    {
                        "run_id": run_id,
                        "bucket": bucket.value,
                        "seq": seq,
                        "status": sample.status,
                        "message": sample.message,
                        "url": sample.url,
                    }
                    for bucket in ErrorBucket
                    for seq, sample in enumerate(aggregator.samples_for(bucket))
                ]
            )
            if not samples_df.empty:
                con.execute("INSERT INTO error_samples SELECT * FROM samples_df")

    def list_runs(self) -> pd.DataFrame:
        with self._connect() as con:
            return con.execute(
                "SELECT run_id, created_at, passed FROM run_meta ORDER BY created_at DESC"
            ).fetchdf()

    def load_run_meta(self, run_id: str) -> dict[str, object] | None:
        with self._connect() as con:
            row = con.execute(
                "SELECT config_json, stats_json, passed FROM run_meta WHERE run_id = ?",
                [run_id],
            ).fetchone()
            if not row:
                return None
            return {
                "config": json.loads(row[0]),
                "stats": json.loads(row[1]),
                "passed": bool(row[2]),
            }

    def load_status_codes(self, run_id: str) -> pd.DataFrame:
        with self._connect() as con:
            return con.execute(
                "SELECT status, occurrences FROM status_codes WHERE run_id = ? ORDER BY seq",
                [run_id],
            ).fetchdf()

    def load_error_samples(self, run_id: str) -> pd.DataFrame:
        with self._connect() as con:
            return con.execute(
                "SELECT bucket, status, message, url FROM error_samples "
                "WHERE run_id = ? ORDER BY bucket, seq",
                [run_id],
            ).fetchdf()

"""Post-load profiling of destination tables.

Runs once after a load completes and only reads the loaded table. Results
are written as CSV files into an output directory.
"""

from pathlib import Path
from typing import List, Optional

import pandas as pd
from sqlalchemy import func, select, table
from sqlalchemy.engine import Engine

from metaloader.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_OUTPUT_ROOT = Path("output/analytics")


class TableProfiler:
    """Data quality and summary profiles of loaded tables.

    Attributes:
        engine: Database engine the tables are read from
        schema: Optional database schema of the tables
    """

    def __init__(self, engine: Engine, schema: Optional[str] = None) -> None:
        self.engine = engine
        self.schema = schema

    def profile(self, table_name: str, output_dir: Path) -> List[Path]:
        """Write null, duplicate and summary profiles of ``table_name``.

        Returns:
            Paths of the files written; empty if the table has no rows
        """
        logger.info(f"Profiling table: {table_name}")
        df = pd.read_sql_table(table_name, self.engine, schema=self.schema)

        if df.empty:
            logger.warning(f"No data found in table: {table_name}")
            return []

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        null_analysis = (
            df.isna()
            .sum()
            .rename_axis("column_name")
            .reset_index(name="null_count")
        )

        total_rows = len(df)
        distinct_rows = len(df.drop_duplicates())
        duplicate_analysis = pd.DataFrame(
            {
                "metric": ["total_rows", "distinct_rows", "duplicate_rows"],
                "value": [total_rows, distinct_rows, total_rows - distinct_rows],
            }
        )

        summary = df.describe(include="all").transpose().rename_axis("column_name")

        written = [
            self._write(null_analysis, output_dir / f"{table_name}_null_analysis.csv"),
            self._write(
                duplicate_analysis, output_dir / f"{table_name}_duplicate_analysis.csv"
            ),
            self._write(summary, output_dir / f"{table_name}_summary.csv", index=True),
        ]

        logger.info(f"Completed profiling of {table_name}: {total_rows} rows")
        return written

    def profile_cross_table(self, table_names: List[str], output_dir: Path) -> Path:
        """Write the row count of each table to one CSV file."""
        counts = []
        for table_name in table_names:
            query = select(func.count().label("row_count")).select_from(
                table(table_name, schema=self.schema)
            )
            count_df = pd.read_sql_query(query, self.engine)
            counts.append(
                {"table_name": table_name, "row_count": int(count_df["row_count"].iloc[0])}
            )

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        return self._write(pd.DataFrame(counts), output_dir / "cross_table_row_counts.csv")

    @staticmethod
    def _write(df: pd.DataFrame, path: Path, index: bool = False) -> Path:
        df.to_csv(path, index=index)
        return path

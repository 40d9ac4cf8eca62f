"""
Unit tests for storage factory and backends.
"""

from datetime import datetime, timezone

import polars as pl
import pytest

from airtrend.storage import JsonStorage, ParquetStorage, create_storage, detect_format, storage_for_path

GENERATED_AT = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class TestStorageFactory:
    """Test cases for storage factory."""

    def test_create_parquet_storage(self):
        storage = create_storage("parquet")
        assert isinstance(storage, ParquetStorage)
        assert storage.compression == "snappy"

        storage = create_storage("parquet", "gzip")
        assert storage.compression == "gzip"

    def test_create_json_storage(self):
        assert isinstance(create_storage("json"), JsonStorage)

    def test_create_storage_unsupported_format(self):
        with pytest.raises(ValueError) as excinfo:
            create_storage("unsupported")
        assert "Unsupported storage format" in str(excinfo.value)

    @pytest.mark.parametrize(
        "path, expected",
        [("a.parquet", "parquet"), ("b.PQ", "parquet"), ("dir/c.json", "json")],
    )
    def test_detect_format(self, path, expected):
        assert detect_format(path) == expected

    def test_detect_format_unknown(self):
        with pytest.raises(ValueError):
            storage_for_path("samples.csv")


class TestBackends:
    """DataFrame and dictionary persistence."""

    @pytest.mark.parametrize("storage", [ParquetStorage(), JsonStorage()])
    def test_dataframe_roundtrip(self, temp_dir, storage):
        df = pl.DataFrame({"station": ["oslo", "bergen"], "aqi": [12.0, None]})
        suffix = "parquet" if isinstance(storage, ParquetStorage) else "json"
        path = str(temp_dir / "nested" / f"frame.{suffix}")

        storage.save_dataframe(df, path)
        assert storage.file_exists(path)
        loaded = storage.load_dataframe(path)
        assert loaded.to_dicts() == df.to_dicts()

        pruned = storage.load_dataframe(path, columns=["aqi"])
        assert pruned.columns == ["aqi"]

    def test_dict_roundtrip(self, temp_dir):
        storage = JsonStorage()
        path = str(temp_dir / "meta.json")
        storage.save_dict({"range": "7d", "metrics": {"aqi": []}}, path)
        assert storage.load_dict(path) == {"range": "7d", "metrics": {"aqi": []}}

    def test_load_missing_file_raises(self, temp_dir):
        with pytest.raises(Exception):
            ParquetStorage().load_dataframe(str(temp_dir / "missing.parquet"))

    def test_documents_are_json_for_every_backend(self, temp_dir):
        path = temp_dir / "out" / "result.json"
        ParquetStorage().save_dict({"generated": GENERATED_AT}, str(path))
        assert JsonStorage().load_dict(str(path)) == {"generated": str(GENERATED_AT)}

    def test_json_rows_may_be_a_bare_list(self, temp_dir):
        path = temp_dir / "rows.json"
        path.write_text('[{"aqi": 3}, {"aqi": 4, "pm25": 1.5}]')
        df = JsonStorage().load_dataframe(str(path))
        assert df.columns == ["aqi", "pm25"]
        assert df["pm25"].to_list() == [None, 1.5]

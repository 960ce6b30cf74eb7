import pytest

from urban_insights.artifacts.paths import (
    InvalidDataPath,
    NoObjectRows,
    NotAnArray,
    PathNotFound,
    resolve_data_path,
    split_data_path,
    to_result_key,
    walk_data_path,
)


class TestSplitDataPath:
    def test_leading_slash_and_blank_segments(self):
        assert split_data_path("/crime//by_year/") == ["crime", "by_year"]

    def test_segments_are_trimmed(self):
        assert split_data_path(" / crime / rows ") == ["crime", "rows"]

    def test_result_key(self):
        assert to_result_key("/crime_trend") == "crime_trend"
        assert to_result_key("crime/rows") == "crime"

    def test_result_key_none(self):
        assert to_result_key(None) is None
        assert to_result_key("") is None
        assert to_result_key("///") is None


class TestResolveDataPath:
    def setup_method(self):
        self.data = {
            "crime": [{"year": 2024, "count": 10}, "noise", {"year": 2025}],
            "empty": [],
            "scalars": [1, 2, 3],
            "nested": {"rows": [{"a": 1}]},
            "text": "hello",
        }

    def test_record_rows_only(self):
        rows = resolve_data_path(self.data, "/crime")
        assert rows == [{"year": 2024, "count": 10}, {"year": 2025}]

    def test_nested_path(self):
        assert resolve_data_path(self.data, "/nested/rows") == [{"a": 1}]

    def test_empty_array_resolves_to_no_rows(self):
        assert resolve_data_path(self.data, "/empty") == []

    def test_missing_path(self):
        with pytest.raises(PathNotFound) as exc:
            resolve_data_path(self.data, "/nope")
        assert str(exc.value) == 'Data not found at path "/nope"'

    def test_descending_through_array_is_not_found(self):
        with pytest.raises(PathNotFound):
            resolve_data_path(self.data, "/crime/0")

    def test_not_an_array(self):
        with pytest.raises(NotAnArray) as exc:
            resolve_data_path(self.data, "/text")
        assert str(exc.value) == 'Data at "/text" is not an array'

    def test_no_object_rows(self):
        with pytest.raises(NoObjectRows) as exc:
            resolve_data_path(self.data, "/scalars")
        assert str(exc.value) == 'Data at "/scalars" has no object rows'

    def test_invalid_path(self):
        with pytest.raises(InvalidDataPath) as exc:
            walk_data_path(self.data, "/")
        assert exc.value.data_path == "/"
        assert str(exc.value) == 'Invalid data path "/"'

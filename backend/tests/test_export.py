import csv
import io
import zipfile

from trackview.core.export import build_export_zip, to_csv
from trackview.core.normalize import normalize


def test_to_csv_uses_union_of_keys():
    text = to_csv([{"a": 1}, {"a": 2, "b": None}, {"b": float("nan"), "c": "x,y"}])
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == ["a", "b", "c"]
    assert rows[1] == ["1", "", ""]
    assert rows[3] == ["", "", "x,y"]


def test_to_csv_empty():
    assert to_csv([]) == ""


def test_zip_has_a_folder_per_file(raw_factory):
    snaps = [normalize(raw_factory(5), "one.fit"), normalize(raw_factory(3), "two.fit")]
    with zipfile.ZipFile(io.BytesIO(build_export_zip(snaps))) as zf:
        names = set(zf.namelist())
        assert names == {
            "one.fit/records.csv", "one.fit/laps.csv", "one.fit/sessions.csv",
            "two.fit/records.csv", "two.fit/laps.csv", "two.fit/sessions.csv",
        }
        records = list(csv.DictReader(io.StringIO(zf.read("two.fit/records.csv").decode())))
    assert len(records) == 3
    assert records[1]["index"] == "1"
    assert records[1]["power"] == ""
    assert records[2]["heart_rate"] == "102.0"

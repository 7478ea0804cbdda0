from src.hrms.hrms.reports.csv_export import rows_to_csv


def test_csv_has_bom_header_and_crlf():
    data = rows_to_csv([{"a": 1, "b": None}], ("a", "b"))

    assert data.startswith(b"\xef\xbb\xbf")
    assert data.decode("utf-8-sig") == "a,b\r\n1,\r\n"


def test_csv_quotes_commas_quotes_and_newlines():
    rows = [{"name": 'Lee, "Pat"', "notes": "line1\nline2", "ok": True}]

    text = rows_to_csv(rows, ("name", "notes", "ok")).decode("utf-8-sig")

    assert text == 'name,notes,ok\r\n"Lee, ""Pat""","line1\nline2",true\r\n'


def test_csv_ignores_extra_keys_and_keeps_column_order():
    text = rows_to_csv([{"b": 2, "a": 1, "zzz": 9}], ("a", "b")).decode("utf-8-sig")
    assert text.splitlines() == ["a,b", "1,2"]

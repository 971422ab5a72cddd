from compile_notify.error_parsing import extract_error_entries

CLOSURE_OUTPUT = """Input_0:12:4: ERROR - [JSC_UNDEFINED_VARIABLE] variable foo is undeclared
  12|     foo();
          ^^^

Input_0:30:0: ERROR - [JSC_PARSE_ERROR] Parse error. missing ; before statement
  30| let x = 1 2
              ^

2 error(s), 0 warning(s)
"""


def test_extracts_each_entry_with_line_and_column() -> None:
    entries = extract_error_entries(CLOSURE_OUTPUT)

    assert [entry.line for entry in entries] == [12, 30]
    assert [entry.column for entry in entries] == [4, 0]
    assert entries[0].input_name == "Input_0"
    assert entries[0].message == "ERROR - [JSC_UNDEFINED_VARIABLE] variable foo is undeclared"
    assert entries[1].message.startswith("ERROR - [JSC_PARSE_ERROR]")


def test_excerpt_stops_at_blank_line() -> None:
    entries = extract_error_entries(CLOSURE_OUTPUT)

    assert entries[0].excerpt.splitlines()[0] == "  12|     foo();"
    assert "error(s)" not in entries[1].excerpt


def test_header_without_column() -> None:
    entries = extract_error_entries("Input_1:7: WARNING - unreachable code\n")

    assert len(entries) == 1
    assert entries[0].line == 7
    assert entries[0].column is None
    assert entries[0].excerpt == ""


def test_text_without_marker_becomes_single_unlinked_entry() -> None:
    entries = extract_error_entries("Service unavailable: compiler crashed\n")

    assert len(entries) == 1
    assert entries[0].line is None
    assert entries[0].message == "Service unavailable: compiler crashed"


def test_empty_text_has_no_entries() -> None:
    assert extract_error_entries("") == []
    assert extract_error_entries("  \n") == []

"""End-to-end tests for analyze()/run(): scenarios, failure policy, determinism, progress."""

import json
import threading

import pytest

from modbus_group_advisor import analyze, export_document, run, validate_input
from modbus_group_advisor.advisor import EMPTY_INPUT_MESSAGE, NO_POINTS_WARNING
from modbus_group_advisor.errors import AnalysisCancelled, GroupAdvisorError, ParseFailedError
from modbus_group_advisor.types import UnitKind

HEADER = "Name\tAddress\tFunctionCode\tType"


def table(*rows: str) -> str:
    return "\n".join([HEADER, *rows])


MIXED = "\n".join(
    [
        "Point name;Register number;Data type;Read function code",
        "Supply temp;40.001;16 bit;FC03",
        "Return temp;40.002;16 bit;FC03",
        "Energy;40.010;32 bit;FC03",
        "Run state;12;Coil;FC01",
        "Fault;13;Coil;FC01",
        "Setpoint;7;16 bit;FC04",
        "Broken;abc;16 bit;FC03",
    ]
)


def test_scenario_single_contiguous_group() -> None:
    result = analyze(table("P0\t0\t3\t16 bit", "P1\t1\t3\t16 bit", "P2\t2\t3\t16 bit"))
    assert len(result.points) == 3
    (g,) = result.groups
    assert g.function_code == 3
    assert g.unit_kind == UnitKind.REGISTER
    assert (g.start_address, g.end_address, g.total_units) == (0, 2, 3)
    assert g.has_gaps is False


def test_scenario_gap_forces_split() -> None:
    result = analyze(table("P0\t0\t3\t16 bit", "P20\t20\t3\t16 bit"))
    assert len(result.groups) == 2


def test_scenario_unrecognized_header() -> None:
    result = analyze("A\tB\tC\n1\t2\t3\n4\t5\t6")
    assert result.points == ()
    assert result.groups == ()
    assert len(result.warnings) == 1
    assert "Header not recognized" in result.warnings[0]


def test_scenario_partial_failure() -> None:
    rows = [f"P{i}\t{i}\t3\t16 bit" for i in range(10)]
    rows[2] = "P2\t2x\t3\t16 bit"
    rows[6] = "P6\t3.14\t3\t16 bit"
    result = analyze(table(*rows))
    assert len(result.points) == 8
    assert len(result.rejects) == 2
    assert all(r.reason for r in result.rejects)
    assert result.warnings
    assert sum(g.num_points for g in result.groups) == 8


def test_zero_success_with_rejects_propagates() -> None:
    with pytest.raises(ParseFailedError) as exc_info:
        analyze(table("A\tx\t3\t16 bit", "B\ty\t3\t16 bit"))
    assert isinstance(exc_info.value, GroupAdvisorError)
    assert "Row 2:" in str(exc_info.value)
    assert "Row 3:" in str(exc_info.value)


def test_empty_input_is_empty_success() -> None:
    result = analyze("")
    assert (result.points, result.rejects, result.groups, result.warnings) == ((), (), (), ())


def test_mixed_export() -> None:
    result = analyze(MIXED)
    assert len(result.points) == 6
    assert [r.name for r in result.rejects] == ["Broken"]
    assert [(g.id, g.function_code, g.unit_kind.value, g.start_address, g.end_address) for g in result.groups] == [
        (1, 1, "coil", 12, 13),
        (2, 3, "register", 40001, 40011),
        (3, 4, "register", 7, 7),
    ]
    fc3 = result.groups[1]
    assert fc3.total_units == 4
    assert fc3.has_gaps is True


def test_to_dict_payload_shape() -> None:
    payload = analyze(MIXED).to_dict()
    assert set(payload) == {"previewRows", "rejectedRows", "groups", "warnings"}
    assert payload["previewRows"][2] == {
        "name": "Energy",
        "address": 40010,
        "length": 2,
        "functionCode": 3,
        "unitKind": "register",
        "rawType": "32 bit",
    }
    assert payload["rejectedRows"] == [
        {
            "rowNumber": 8,
            "name": "Broken",
            "reason": "Invalid address: 'abc'",
            "rawLine": "Broken;abc;16 bit;FC03",
        }
    ]
    group = payload["groups"][0]
    assert group["numPoints"] == 2
    assert group["entries"][0] == {
        "name": "Run state",
        "address": 12,
        "length": 1,
        "functionCode": 1,
        "unitKind": "coil",
    }
    assert "rawType" not in group["entries"][0]


def test_repeated_runs_are_byte_identical() -> None:
    first = run(MIXED)
    second = run(MIXED)
    assert first.analysis_json == second.analysis_json
    assert first.xml == second.xml
    assert first.xml == export_document(first.result.groups)
    assert json.loads(first.analysis_json) == first.result.to_dict()


def test_run_without_groups_has_empty_xml_and_warning() -> None:
    report = run(HEADER)
    assert report.xml == ""
    assert report.warnings == (NO_POINTS_WARNING,)
    assert report.summary == "Parsed=0 Groups=0 Rejected=0"


def test_run_keeps_header_warning_only() -> None:
    report = run("A\tB\n1\t2")
    assert len(report.warnings) == 1
    assert report.warnings[0].startswith("Header not recognized")


def test_validate_input() -> None:
    assert validate_input("   \n") == [EMPTY_INPUT_MESSAGE]
    assert validate_input(HEADER) == []


def test_progress_stages() -> None:
    seen: list[tuple[int, str]] = []
    analyze(table("P0\t0\t3\t16 bit"), progress=lambda pct, stage, _msg: seen.append((pct, stage)))
    assert seen == [(5, "Parse"), (30, "Parse"), (70, "Group"), (100, "Done")]


def test_cancellation_is_not_a_parse_failure() -> None:
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(AnalysisCancelled) as exc_info:
        analyze(table("P0\t0\t3\t16 bit"), cancel_event=cancel)
    assert not isinstance(exc_info.value, GroupAdvisorError)


def test_no_state_between_calls() -> None:
    first = analyze(table("P0\t0\t3\t16 bit"))
    second = analyze(table("Q5\t5\t4\t16 bit"))
    assert [p.name for p in second.points] == ["Q5"]
    assert second.groups[0].id == 1
    assert first.groups[0].entries[0].name == "P0"

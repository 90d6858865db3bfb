#!/usr/bin/env python3
"""Example: analyze a pasted register list, print the read groups and save the XML export."""

import sys
import threading
from pathlib import Path

from modbus_group_advisor import analyze, export_document
from modbus_group_advisor.errors import AnalysisCancelled, ParseFailedError

PASTED = """\
Name\tRegister number\tData type\tRead function code
Supply temp\t40001\t16 bit\tFC03
Return temp\t40002\t16 bit\tFC03
Energy meter\t40010\t32 bit\tFC03
Pump run\t12\tCoil\tFC01
Pump fault\t13\tCoil\tFC01
"""


def main() -> None:
    # set from another thread (e.g. a UI cancel button) to stop a long analysis
    cancel = threading.Event()

    try:
        result = analyze(PASTED, cancel_event=cancel)
    except ParseFailedError as e:
        print(f"Nothing could be parsed:\n{e}", file=sys.stderr)
        sys.exit(1)
    except AnalysisCancelled:
        print("Cancelled.", file=sys.stderr)
        sys.exit(1)

    print(result.summary)
    for g in result.groups:
        names = ", ".join(p.name for p in g.entries)
        print(f"  #{g.id} FC{g.function_code} {g.unit_kind.value} {g.start_address}-{g.end_address}: {names}")
    for w in result.warnings:
        print(f"Warning: {w}", file=sys.stderr)

    out = Path("modbus_groups.xml")
    out.write_text(export_document(result.groups), encoding="utf-8")
    print(f"Wrote {out}")


if __name__ == "__main__":
    main()

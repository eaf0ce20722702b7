"""
Output formatting.

Every command writes exactly one JSON document to stdout. Failures are
reported in the body ({"success": false, "error": ...}); the exit status
stays 0, so callers must parse the output.
"""

import json
import sys
from typing import Any, Dict


def format_output(data: Dict[str, Any], pretty: bool = False) -> str:
    return json.dumps(data, indent=2 if pretty else None, ensure_ascii=False)


def print_result(data: Dict[str, Any], pretty: bool = False) -> None:
    sys.stdout.write(format_output(data, pretty) + "\n")
    sys.stdout.flush()


def error_body(error: Exception) -> Dict[str, Any]:
    return {"success": False, "error": str(error)}

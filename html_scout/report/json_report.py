# html_scout/report/json_report.py

"""
JSON report generation for HtmlScout.

Serializes a ScanReport to a file.
"""
import json
from pathlib import Path

from html_scout.aggregator import ScanReport


def render_json(report: ScanReport, output_path: Path | str) -> Path:
    """
    Save *report* as JSON at *output_path*.

    :param report: ScanReport with the scan findings
    :param output_path: path of the JSON file
    :return: Path of the saved file

    Example:
    ```python
    from html_scout.report.json_report import render_json
    report_path = render_json(report, 'reports/report.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(report.to_dict(), f, ensure_ascii=False, indent=2)

    return output

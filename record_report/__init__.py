"""
Record Report: render tabular business records into self-contained HTML.

Example:
    >>> from record_report import generate_table
    >>> html = generate_table(
    ...     [{"name": "办公设备采购合同", "amount": 1234.5}],
    ...     [
    ...         {"field": "name", "label": "合同名称"},
    ...         {"field": "amount", "label": "金额", "type": "currency", "currency": "CNY"},
    ...     ],
    ...     {"title": "我的合同报表"},
    ... )
"""

from record_report.report.cell_formatter import format_cell
from record_report.report.generator import generate_table, write_report

__all__ = ["format_cell", "generate_table", "write_report"]

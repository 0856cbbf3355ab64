#!/usr/bin/env python3
"""
Generate an HTML report of active contracts with the Python API.

This script demonstrates how to:
- Fetch records from a data source with an equality filter
- Declare report columns as plain dicts
- Supply a "generated at" subtitle from the caller side
- Write the report to disk

Usage:
    python examples/code-examples/generate_contract_report.py
"""

import asyncio
import sys
from pathlib import Path

from record_report import generate_table, write_report
from record_report.exceptions import ConfigurationError
from record_report.sources import MockDataSource
from record_report.utils.time import utc_now

COLUMNS = [
    {"field": "contractNumber", "label": "合同编号"},
    {"field": "name", "label": "合同名称"},
    {"field": "type", "label": "类型"},
    {"field": "amount", "label": "金额", "type": "currency", "currency": "CNY"},
    {"field": "counterparty", "label": "对方单位"},
    {"field": "status", "label": "状态", "type": "status", "mapping": {"active": "生效中"}},
    {"field": "startDate", "label": "开始日期", "type": "date"},
    {"field": "endDate", "label": "结束日期", "type": "date"},
]


async def main() -> int:
    source = MockDataSource()
    contracts = await source.get_contracts({"status": "active"})
    print(f"Fetched {len(contracts)} contracts")

    try:
        html = generate_table(
            contracts,
            COLUMNS,
            {
                "title": "我的合同报表",
                "subtitle": f"生成于 {utc_now():%Y-%m-%d}",
                "lang": "zh-CN",
            },
        )
    except ConfigurationError as e:
        print(f"Invalid report columns: {e}", file=sys.stderr)
        return 1

    output_file = write_report(Path("output") / "my-report.html", html)
    print(f"Report saved: {output_file}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

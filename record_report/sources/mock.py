"""
Mock contract data source.

Provides MockDataSource, an in-memory RecordSource with sample contracts.
Used by the demo command and tests to exercise the full pipeline without a
real backend.

Example:
    >>> source = MockDataSource()
    >>> contracts = await source.get_contracts({"status": "active"})
    >>> {c["status"] for c in contracts}
    {'active'}
"""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .base import apply_filters

logger = logging.getLogger(__name__)

SAMPLE_CONTRACTS: tuple[dict[str, Any], ...] = (
    {
        "contractNumber": "HT-2024-001",
        "name": "办公设备采购合同",
        "type": "采购合同",
        "amount": 1234.5,
        "counterparty": "北京星辰科技有限公司",
        "status": "active",
        "startDate": "2024-03-15",
        "endDate": "2025-03-14",
    },
    {
        "contractNumber": "HT-2024-002",
        "name": "软件许可与维护服务合同",
        "type": "服务合同",
        "amount": 286000,
        "counterparty": "上海云帆信息技术有限公司",
        "status": "active",
        "startDate": "2024-01-01",
        "endDate": "2026-12-31",
    },
    {
        "contractNumber": "HT-2023-017",
        "name": "仓储租赁合同",
        "type": "租赁合同",
        "amount": 96000,
        "counterparty": "广州顺达物流有限公司",
        "status": "expired",
        "startDate": "2023-01-01",
        "endDate": "2023-12-31",
    },
    {
        "contractNumber": "HT-2024-009",
        "name": "市场推广合作协议",
        "type": "合作协议",
        "amount": 50000.0,
        "counterparty": "深圳 <Bright> & Partners",
        "status": "pending",
        "startDate": "2024-06-01",
        "endDate": None,
    },
    {
        "contractNumber": "HT-2022-031",
        "name": "物业管理服务合同",
        "type": "服务合同",
        "amount": "待定",
        "counterparty": "杭州安居物业管理有限公司",
        "status": "terminated",
        "startDate": "2022-07-01",
        "endDate": "2024-02-30",
    },
)

# Contract report layout used by the demo command
CONTRACT_COLUMNS: tuple[dict[str, Any], ...] = (
    {"field": "contractNumber", "label": "合同编号"},
    {"field": "name", "label": "合同名称"},
    {"field": "type", "label": "类型"},
    {"field": "amount", "label": "金额", "type": "currency", "currency": "CNY"},
    {"field": "counterparty", "label": "对方单位"},
    {
        "field": "status",
        "label": "状态",
        "type": "status",
        "mapping": {
            "draft": {"label": "草稿", "style": "muted"},
            "pending": {"label": "待审批", "style": "warning"},
            "active": {"label": "生效中", "style": "success"},
            "expired": {"label": "已过期", "style": "muted"},
            "terminated": {"label": "已终止", "style": "danger"},
        },
    },
    {"field": "startDate", "label": "开始日期", "type": "date"},
    {"field": "endDate", "label": "结束日期", "type": "date"},
)


@dataclass
class MockDataSource:
    """
    In-memory contract source that implements the RecordSource protocol.

    Attributes:
        records: Contracts to serve. Defaults to SAMPLE_CONTRACTS.
        latency_ms: Simulated retrieval delay in milliseconds. Defaults to 0.

    Example:
        >>> source = MockDataSource(records=[{"status": "active", "name": "A"}])
        >>> await source.get_records({"status": "expired"})
        []
    """

    records: list[dict[str, Any]] = field(
        default_factory=lambda: [dict(c) for c in SAMPLE_CONTRACTS]
    )
    latency_ms: int = 0

    async def get_records(
        self, filters: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """
        Return copies of the records matching all equality filters.

        Args:
            filters: Field -> required value; None or {} returns everything

        Returns:
            Matching records in source order
        """
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000)

        matched = apply_filters(self.records, filters)
        logger.debug(
            "Mock records fetched",
            extra={"context": {"filters": dict(filters or {}), "count": len(matched)}},
        )
        return matched

    async def get_contracts(
        self, filters: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Fetch contracts; same as get_records."""
        return await self.get_records(filters)

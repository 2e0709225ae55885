"""
工具注册中心：启动时由各工具来源模块分批注册，之后只读

- 保持注册顺序（自省输出顺序稳定）
- id 冲突在注册时直接拒绝（Fail Fast），同一批次内重复也拒绝
- freeze() 之后不允许再注册，所有查询都是纯读操作，无需加锁
"""

from typing import Iterable

import structlog

from app.tools.base import BaseTool
from app.tools.errors import ToolRegistrationError

log = structlog.get_logger()


class ToolRegistry:
    """工具注册中心"""

    def __init__(self):
        self._tools: list[BaseTool] = []
        self._index: dict[str, BaseTool] = {}
        self._frozen = False

    def register(self, tools: Iterable[BaseTool]) -> None:
        """
        追加一批工具。

        整批先校验再写入：任一 id 冲突则整批都不生效。
        """
        if self._frozen:
            raise ToolRegistrationError("工具注册中心已冻结，不允许继续注册")

        batch = list(tools)
        seen: set[str] = set()
        for tool in batch:
            if tool.id in self._index or tool.id in seen:
                raise ToolRegistrationError(f"工具 id 重复: {tool.id}")
            seen.add(tool.id)

        for tool in batch:
            self._tools.append(tool)
            self._index[tool.id] = tool
            log.debug("工具已注册", tool=tool.id, has_output_schema=tool.output_model is not None)

    def freeze(self) -> None:
        """装配完成：此后注册中心只读"""
        self._frozen = True
        log.info("工具注册中心已冻结", tool_count=len(self._tools), tools=self.tool_ids)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def find_by_id(self, tool_id: str) -> BaseTool | None:
        """精确匹配 id，未注册返回 None"""
        return self._index.get(tool_id)

    def has_tool(self, tool_id: str) -> bool:
        return tool_id in self._index

    def list_all(self) -> tuple[BaseTool, ...]:
        """按注册顺序返回全部工具（不可变快照）"""
        return tuple(self._tools)

    @property
    def tool_ids(self) -> list[str]:
        return [tool.id for tool in self._tools]

    @property
    def tool_count(self) -> int:
        return len(self._tools)

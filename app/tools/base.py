"""
工具抽象基类 + 调用上下文 + Schema 导出

BaseTool 强制约束：
1. id / name / description / input_model — 定义工具身份与入参 Schema（Pydantic 生成，杜绝手写 dict 出错）
2. output_model — 可选，声明成功结果的形状（用于自省，且默认由网关强制校验）
3. run — 接收**已校验**的入参模型实例 + ToolContext，可为同步或异步函数

同一个 Pydantic 模型同时承担两种能力：
- 校验：validate_input / validate_output
- 描述：input_schema / output_schema（可序列化的 JSON Schema）
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from app.tools.session_state import SessionStateStore


class ToolInput(BaseModel):
    """工具入参基类：未声明的字段直接拒绝，类型不符不做隐式转换（"3" / 3.0 / True 都不算 int）"""

    model_config = ConfigDict(extra="forbid", strict=True)


# 不递归清理的键：其值是数据而不是 Schema
_VALUE_KEYS = {"default", "examples", "const", "enum"}


def _strip_titles(node: Any) -> Any:
    """移除 Pydantic 附加的 title 字段，保留字段名本身叫 title 的属性"""
    if isinstance(node, list):
        return [_strip_titles(item) for item in node]
    if not isinstance(node, dict):
        return node

    cleaned = {}
    for key, value in node.items():
        if key == "title" and isinstance(value, str):
            continue
        if key in ("properties", "$defs") and isinstance(value, dict):
            cleaned[key] = {name: _strip_titles(sub) for name, sub in value.items()}
        elif key in _VALUE_KEYS:
            cleaned[key] = value
        else:
            cleaned[key] = _strip_titles(value)
    return cleaned


def export_schema(model: type[BaseModel]) -> dict:
    """把 Pydantic 模型导出为可移植的 JSON Schema（字段、类型、必填、嵌套结构）"""
    return _strip_titles(model.model_json_schema(by_alias=True))


@dataclass
class ToolContext:
    """
    单次工具调用上下文。

    session_id 为空时（调用方未指定会话），get_state / set_state 直接跳过，不读写共享状态。
    """

    tool_id: str
    state: "SessionStateStore"
    session_id: str | None = None
    user_id: int | None = None

    async def get_state(self, default: Any = None) -> Any:
        """读取本会话下本工具的持久状态"""
        if not self.session_id:
            return default
        return await self.state.get(self.session_id, self.tool_id, default)

    async def set_state(self, value: Any) -> None:
        """写入本会话下本工具的持久状态（覆盖）"""
        if not self.session_id:
            return
        await self.state.set(self.session_id, self.tool_id, value)


class BaseTool(ABC):
    """工具抽象基类，所有工具必须继承"""

    @property
    @abstractmethod
    def id(self) -> str:
        """工具唯一标识（分发键，不可复用给其他工具）"""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """展示名称"""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """工具描述（给调用方看）"""
        ...

    @property
    @abstractmethod
    def input_model(self) -> type[BaseModel]:
        """入参 Pydantic Model"""
        ...

    @property
    def output_model(self) -> type[BaseModel] | None:
        """结果 Pydantic Model，默认不声明"""
        return None

    @abstractmethod
    def run(self, params: BaseModel, ctx: ToolContext) -> Any | Awaitable[Any]:
        """执行工具。params 已通过 input_model 校验；可以是 async def"""
        ...

    def validate_input(self, raw: Any) -> BaseModel:
        """校验原始入参，失败抛 pydantic.ValidationError"""
        return self.input_model.model_validate(raw)

    def validate_output(self, value: Any) -> None:
        """按 output_model 校验结果；未声明 output_model 时不做任何事"""
        if self.output_model is not None:
            self.output_model.model_validate(value)

    def input_schema(self) -> dict:
        return export_schema(self.input_model)

    def output_schema(self) -> dict | None:
        if self.output_model is None:
            return None
        return export_schema(self.output_model)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id!r}>"


class FunctionTool(BaseTool):
    """
    把一个普通函数包装成工具描述符。

    用法：
        FunctionTool(
            id="user_tool",
            name="User Tool",
            description="按 id 查询用户",
            input_model=GetUserInput,
            fn=get_user,
        )
    """

    def __init__(
        self,
        *,
        id: str,
        name: str,
        description: str,
        input_model: type[BaseModel],
        fn: Callable[[BaseModel, ToolContext], Any],
        output_model: type[BaseModel] | None = None,
    ):
        self._id = id
        self._name = name
        self._description = description
        self._input_model = input_model
        self._output_model = output_model
        self._fn = fn

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def input_model(self) -> type[BaseModel]:
        return self._input_model

    @property
    def output_model(self) -> type[BaseModel] | None:
        return self._output_model

    def run(self, params: BaseModel, ctx: ToolContext) -> Any:
        return self._fn(params, ctx)

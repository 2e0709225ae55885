"""
工具调用网关：按 id 解析工具 → 校验入参 → 执行 → 归一化结果或错误

执行流程：
1. 注册中心查找 tool_id，不存在 → InvalidToolError
2. input_model 校验（未知 / 缺失 / 类型不符字段均拒绝），失败 → InvalidInputError，工具函数不会被调用
3. 以**校验后的**模型实例调用工具（同步或异步均可），只调用一次
4. 异常分类：
   - 网关自身的 ToolError 原样上抛
   - 其他 AppError（用户不存在、邮箱已占用等业务错误）→ ExecutionFailedError，保留原文案
   - ToolExecutionError → ExecutionFailedError，携带原始消息
   - 其他任何异常 → InternalFailureError，固定文案，细节只进日志
   - CancelledError 为系统级中断，必须向上传播
5. 声明了 output_model 且开启强制校验时，结果不符 → InternalFailureError
6. 返回 {"result": 工具返回值}（原值，不做转换）

网关本身无状态，可被并发请求共享。
"""

import asyncio
import inspect
import time
from typing import Any

import structlog
from pydantic import ValidationError

from app.errors import AppError, format_validation_errors
from app.observability.metrics import ERROR_TOTAL, TOOL_CALL_DURATION, TOOL_CALL_TOTAL
from app.tools.base import ToolContext
from app.tools.errors import (
    ExecutionFailedError,
    InternalFailureError,
    InvalidInputError,
    InvalidToolError,
    ToolError,
    ToolExecutionError,
)
from app.tools.registry import ToolRegistry
from app.tools.session_state import SessionStateStore

log = structlog.get_logger()


class ToolGateway:
    """工具调用网关"""

    def __init__(
        self,
        registry: ToolRegistry,
        state: SessionStateStore,
        *,
        enforce_output_schema: bool = True,
    ):
        self._registry = registry
        self._state = state
        self._enforce_output_schema = enforce_output_schema

    async def execute(
        self,
        tool_id: str,
        inputs: Any = None,
        *,
        session_id: str | None = None,
        user_id: int | None = None,
    ) -> dict[str, Any]:
        """执行一次工具调用，成功返回 {"result": ...}，失败抛 AppError 子类"""
        tool = self._registry.find_by_id(tool_id)
        if tool is None:
            ERROR_TOTAL.labels(error_type="invalid_tool").inc()
            log.info("未知工具", tool=tool_id)
            raise InvalidToolError(tool_id)

        try:
            params = tool.validate_input({} if inputs is None else inputs)
        except ValidationError as e:
            diagnostic = format_validation_errors(e.errors())
            TOOL_CALL_TOTAL.labels(tool_id=tool_id, status="invalid_input").inc()
            ERROR_TOTAL.labels(error_type="invalid_input").inc()
            log.info("工具入参校验失败", tool=tool_id, diagnostic=diagnostic)
            raise InvalidInputError(diagnostic) from None

        ctx = ToolContext(tool_id=tool_id, state=self._state, session_id=session_id, user_id=user_id)
        log.debug("工具开始执行", tool=tool_id, session_id=session_id)

        start = time.monotonic()
        try:
            result = tool.run(params, ctx)
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError:
            # 请求被取消，必须向上传播，不可吞掉
            log.warning("工具执行被取消", tool=tool_id)
            raise
        except ToolError:
            TOOL_CALL_TOTAL.labels(tool_id=tool_id, status="failed").inc()
            raise
        except AppError as e:
            # 业务错误（用户不存在、邮箱已占用等）保留原文案，状态统一为 ExecutionFailed 400
            TOOL_CALL_TOTAL.labels(tool_id=tool_id, status="failed").inc()
            ERROR_TOTAL.labels(error_type="tool_error").inc()
            log.warning("工具返回业务错误", tool=tool_id, status_code=e.status_code, error=e.message)
            raise ExecutionFailedError(e.message) from e
        except ToolExecutionError as e:
            TOOL_CALL_TOTAL.labels(tool_id=tool_id, status="failed").inc()
            ERROR_TOTAL.labels(error_type="tool_error").inc()
            log.warning("工具执行失败", tool=tool_id, error=str(e))
            raise ExecutionFailedError(str(e)) from e
        except Exception as e:
            TOOL_CALL_TOTAL.labels(tool_id=tool_id, status="internal").inc()
            ERROR_TOTAL.labels(error_type="internal").inc()
            log.error("工具执行异常", tool=tool_id, error=str(e), exc_info=True)
            raise InternalFailureError() from e
        finally:
            TOOL_CALL_DURATION.labels(tool_id=tool_id).observe((time.monotonic() - start) * 1000)

        if self._enforce_output_schema and tool.output_model is not None:
            try:
                tool.validate_output(result)
            except ValidationError as e:
                TOOL_CALL_TOTAL.labels(tool_id=tool_id, status="internal").inc()
                ERROR_TOTAL.labels(error_type="internal").inc()
                log.error(
                    "工具返回值不符合 output_model",
                    tool=tool_id,
                    diagnostic=format_validation_errors(e.errors()),
                )
                raise InternalFailureError() from None

        TOOL_CALL_TOTAL.labels(tool_id=tool_id, status="success").inc()
        return {"result": result}

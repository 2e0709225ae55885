"""
工具网关异常体系

调用方可见（HTTP 映射）：
- InvalidToolError      400  工具 id 未注册
- InvalidInputError     400  入参校验失败，携带字段级诊断
- ExecutionFailedError  400  工具逻辑抛出可识别的失败（ToolExecutionError）
- InternalFailureError  500  未识别异常，固定文案，不泄露内部细节

工具内部使用：
- ToolExecutionError    工具主动报告的业务失败，由网关转为 ExecutionFailedError

启动期：
- ToolRegistrationError 注册冲突 / 冻结后注册
"""

from app.errors import AppError

INTERNAL_FAILURE_MESSAGE = "工具执行失败"


class ToolError(AppError):
    """网关错误基类"""

    status_code = 400


class InvalidToolError(ToolError):
    def __init__(self, tool_id: str):
        super().__init__(f"无效工具: {tool_id}")
        self.tool_id = tool_id


class InvalidInputError(ToolError):
    def __init__(self, diagnostic: str):
        super().__init__(f"工具入参校验失败: {diagnostic}")
        self.diagnostic = diagnostic


class ExecutionFailedError(ToolError):
    def __init__(self, reason: str):
        super().__init__(f"工具执行失败: {reason}")
        self.reason = reason


class InternalFailureError(ToolError):
    status_code = 500

    def __init__(self):
        super().__init__(INTERNAL_FAILURE_MESSAGE)


class ToolExecutionError(Exception):
    """工具函数主动抛出的可识别失败，message 会返回给调用方"""


class ToolRegistrationError(Exception):
    """工具注册冲突（id 重复）或在注册中心冻结后继续注册"""

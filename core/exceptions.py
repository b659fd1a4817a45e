"""账本异常体系"""


class LedgerError(Exception):
    """所有账本错误的基类"""


class ValidationError(LedgerError):
    """输入格式错误或超出范围，field 指明出错字段"""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class InvalidStateError(LedgerError):
    """记录当前状态不允许该操作（如余额已为 0 仍要整笔收款）"""


class NotFoundError(LedgerError):
    """引用的记录不存在"""


class PersistenceError(LedgerError):
    """写入存储失败，内存中的记录已回滚"""

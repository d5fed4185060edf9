"""投递异常类型。"""


class DeliveryError(Exception):
    """
    单条出站消息发送失败。

    渠道在 HTTP 错误、超时或未连接时抛出，由投递序列器捕获并记录，
    不会中断同一批次中剩余的发送。
    """

    def __init__(self, message: str, channel: str = "", chat_id: str = ""):
        super().__init__(message)
        self.channel = channel
        self.chat_id = chat_id

"""领域层模型与异常。

包含：
- models: AuthResult / OutboundRequest 等请求级数据结构。
- exceptions: 业务异常类型定义及其 HTTP 状态码映射。
"""

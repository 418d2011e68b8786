"""Chat Relay 顶层包。

该包提供 Revit 助手前端使用的聊天补全中继服务，
包括配置加载、鉴权闸门、工具 schema 规范化、请求组装、
OpenAI Provider 适配以及流式响应透传等能力。
"""

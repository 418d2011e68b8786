"""工具参数 schema 规范化。

调用方传入的 inputSchema 可能缺字段、结构不完整，甚至根本不是对象。
normalize_schema 把它整理成 LLM function-calling 接口可接受的最小形态：

- 每个节点都有 type（缺省为 "object"）。
- 每个节点都有 properties 映射（可以为空）。
- type 为 "array" 的节点一定有 items（缺省为 {"type": "string"}）。

每一层都是浅拷贝，不修改调用方的原始结构。items 不做递归规范化。
"""

from typing import Any, Dict

from chat_relay.domain.exceptions import SchemaValidationError


# properties 的最大嵌套层数，超过即视为非法输入（也挡住自引用结构）
MAX_SCHEMA_DEPTH = 32


def empty_object_schema() -> Dict[str, Any]:
    return {"type": "object", "properties": {}}


def normalize_schema(schema: Any, depth: int = 0) -> Dict[str, Any]:
    """规范化单个 schema 节点，并递归处理其 properties。

    Args:
        schema: 调用方提供的任意值。
        depth: 当前嵌套深度，由递归调用传入。

    Returns:
        新的 schema dict。

    Raises:
        SchemaValidationError: 嵌套深度超过 MAX_SCHEMA_DEPTH。
    """

    if depth > MAX_SCHEMA_DEPTH:
        raise SchemaValidationError(
            code="SCHEMA_TOO_DEEP",
            message=f"Tool schema nesting exceeds {MAX_SCHEMA_DEPTH} levels",
            max_depth=MAX_SCHEMA_DEPTH,
        )
    if not isinstance(schema, dict):
        return empty_object_schema()

    clean = dict(schema)
    if not clean.get("type"):
        clean["type"] = "object"

    properties = clean.get("properties")
    if isinstance(properties, dict):
        clean["properties"] = _normalize_properties(properties, depth)
    else:
        # 缺失或不是映射（列表、字符串等）时一律替换为空映射
        clean["properties"] = {}

    if clean["type"] == "array" and not clean.get("items"):
        clean["items"] = {"type": "string"}

    return clean


def _normalize_properties(properties: Dict[str, Any], depth: int) -> Dict[str, Any]:
    """逐个规范化属性 schema。

    映射、列表与 None 都按 schema 节点处理（列表会变成空对象 schema），
    字符串、数字、布尔等标量原样保留。
    """

    cleaned: Dict[str, Any] = {}
    for key, value in properties.items():
        if value is None or isinstance(value, (dict, list)):
            cleaned[key] = normalize_schema(value, depth + 1)
        else:
            cleaned[key] = value
    return cleaned

from logicflow.dsl.parser import ParseResult, ParserMode, parse_graph, parse_logic_text
from logicflow.dsl.serializer import serialize_graph, structural_signature

__all__ = [
    "ParseResult",
    "ParserMode",
    "parse_graph",
    "parse_logic_text",
    "serialize_graph",
    "structural_signature",
]

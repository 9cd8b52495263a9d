from application.services.attribute_codec import CLASS_ATTRIBUTE, CLASS_FIELD, AttributeCodec, build_index_row
from application.services.document_resolver import DocumentResolver
from application.services.identifier_generator import IdentifierGenerator
from application.services.query_builder import QueryBuilder, normalize_page
from application.services.registry import ClassRegistration, ClassRegistry
from application.services.result_decoder import DecodedMatches, ResultDecoder
from application.services.search_results import assemble_results

__all__ = [
    "AttributeCodec",
    "CLASS_ATTRIBUTE",
    "CLASS_FIELD",
    "ClassRegistration",
    "ClassRegistry",
    "DecodedMatches",
    "DocumentResolver",
    "IdentifierGenerator",
    "QueryBuilder",
    "ResultDecoder",
    "assemble_results",
    "build_index_row",
    "normalize_page",
]

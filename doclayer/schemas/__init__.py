"""Field schemas and document coercion.

- FieldSpec: Declarative description of one field
- CastName / CASTS: Built-in cast functions, resolved when a spec is built
- SchemaCoercer: Applies a schema to a document, a list, or a page envelope
- PageDescriptor: Canonical sort + pagination

Example:
    from doclayer.schemas import FieldSpec, SchemaCoercer

    coercer = SchemaCoercer([
        FieldSpec(name="firstName", required=True, cast="firstName"),
        FieldSpec(name="phone", cast="phone"),
    ])
    coercer.coerce({"name": "Jane Doe", "phone": "(201) 555-0123"})
    # {"firstName": "Jane", "phone": "+12015550123", "name": "Jane Doe"}
"""

from .base import PageDescriptor
from .casts import CASTS, DEFAULT_PHONE_REGION, CastName
from .coercer import CoercionResult, SchemaCoercer, Shape, coerce
from .field_spec import FieldSpec, build_schema

__all__ = [
    "PageDescriptor",
    "CASTS",
    "DEFAULT_PHONE_REGION",
    "CastName",
    "CoercionResult",
    "SchemaCoercer",
    "Shape",
    "coerce",
    "FieldSpec",
    "build_schema",
]

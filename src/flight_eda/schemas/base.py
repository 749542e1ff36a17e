"""Base schema definitions and utilities."""

from dataclasses import dataclass
from typing import Optional
import pyarrow as pa


@dataclass
class SchemaField:
    """Definition of a schema field."""

    name: str
    dtype: pa.DataType
    required: bool = True
    nullable: bool = True
    description: str = ""


class BaseSchema:
    """
    Base class for schema definitions.

    Subclasses define fields as class attributes using SchemaField.
    Fields keep their declaration order.
    """

    table_name: Optional[str] = None

    @classmethod
    def fields(cls) -> list[SchemaField]:
        """Get all schema fields."""
        seen = {}
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, SchemaField):
                    seen[name] = value
        return list(seen.values())

    @classmethod
    def field_names(cls) -> list[str]:
        """Get list of field names."""
        return [f.name for f in cls.fields()]

    @classmethod
    def validate_schema(cls, schema: pa.Schema) -> list[str]:
        """
        Check column presence and types without reading any rows.

        Returns list of validation errors (empty if valid).
        """
        errors = []

        for field in cls.fields():
            if field.name not in schema.names:
                if field.required:
                    errors.append(f"Missing required column: {field.name}")
                continue

            actual_type = schema.field(field.name).type
            if not actual_type.equals(field.dtype) and not cls._types_compatible(actual_type, field.dtype):
                errors.append(
                    f"Type mismatch for {field.name}: "
                    f"expected {field.dtype}, got {actual_type}"
                )

        return errors

    @classmethod
    def validate(cls, table: pa.Table) -> list[str]:
        """
        Validate a PyArrow table against the schema.

        Returns list of validation errors (empty if valid).
        """
        errors = cls.validate_schema(table.schema)

        for field in cls.fields():
            if field.nullable or field.name not in table.column_names:
                continue
            if table.column(field.name).null_count > 0:
                errors.append(f"Null values in non-nullable column: {field.name}")

        return errors

    @classmethod
    def _types_compatible(cls, actual: pa.DataType, expected: pa.DataType) -> bool:
        """Check if types are compatible for coercion."""
        # All-null columns carry no type information
        if pa.types.is_null(actual):
            return True
        if pa.types.is_integer(actual) and (pa.types.is_integer(expected) or pa.types.is_floating(expected)):
            return True
        if pa.types.is_floating(actual) and pa.types.is_floating(expected):
            return True
        if _is_string(actual) and _is_string(expected):
            return True
        # ISO strings and dates are accepted for timestamps
        if (pa.types.is_date(actual) or pa.types.is_timestamp(actual) or _is_string(actual)) and \
           (pa.types.is_date(expected) or pa.types.is_timestamp(expected)):
            return True
        return False


def _is_string(dtype: pa.DataType) -> bool:
    return pa.types.is_string(dtype) or pa.types.is_large_string(dtype)

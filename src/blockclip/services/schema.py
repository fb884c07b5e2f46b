"""Validation of constrained field values against the destination schema."""

from typing import Any, Optional, Protocol

from block_tree import BlockNode, SymbolRef, visit
from blockclip.models.report import FieldCorrection, FieldValidation
from blockclip.utils.logging import get_logger


logger = get_logger(__name__)


class FieldOptionProvider(Protocol):
    """Destination-side source of valid field values.

    ``enumerate_field_options`` returns None for free-form fields and the
    list of allowed values for constrained ones.
    """

    def enumerate_field_options(self, kind: str, field_name: str) -> Optional[list[Any]]: ...


def validate_field(
    schema: FieldOptionProvider,
    kind: str,
    field_name: str,
    value: Any,
) -> FieldValidation:
    """Check one field value against the destination's option set.

    Symbol references are left alone without asking the provider.

    Args:
        schema: Destination option provider
        kind: Block kind holding the field
        field_name: Field name
        value: Current value

    Returns:
        FieldValidation with the value to keep. ``changed`` is set when the
        value was replaced; ``warning`` is set for the empty-option fallback
        and when the provider could not list options.

    Examples:
        >>> validate_field(schema, "pickMode", "MODE", "Legacy").value
        'A'   # with options ["A", "B"]
    """
    if isinstance(value, SymbolRef):
        return FieldValidation(value=value)

    try:
        options = schema.enumerate_field_options(kind, field_name)
    except Exception as e:
        logger.warning(
            "field_options_unavailable",
            kind=kind,
            field=field_name,
            error=str(e),
        )
        return FieldValidation(
            value=value,
            warning=f"Could not list options for {kind}.{field_name}: {e}",
        )

    if options is None:
        return FieldValidation(value=value)

    if not options:
        return FieldValidation(
            value="",
            changed=value != "",
            warning=f"No valid options for {kind}.{field_name}; value cleared",
        )

    if value in options:
        return FieldValidation(value=value)

    return FieldValidation(value=options[0], changed=True)


class SchemaValidator:
    """Applies :func:`validate_field` to every field of a subtree."""

    def __init__(self, schema: FieldOptionProvider) -> None:
        self.schema = schema

    def validate_subtree(self, root: BlockNode) -> list[FieldCorrection]:
        """Replace invalid constrained values in place.

        Args:
            root: Subtree root (its ``next`` chain is included)

        Returns:
            One FieldCorrection per replaced value or warning
        """
        corrections: list[FieldCorrection] = []

        def validate_block(block: BlockNode) -> None:
            for field_name, value in list(block.fields.items()):
                result = validate_field(self.schema, block.kind, field_name, value)

                if result.changed:
                    block.set_field(field_name, result.value)
                    logger.warning(
                        "field_value_replaced",
                        kind=block.kind,
                        field=field_name,
                        degraded=result.warning is not None,
                    )

                if result.changed or result.warning:
                    corrections.append(
                        FieldCorrection(kind=block.kind, field_name=field_name, warning=result.warning)
                    )

        visit(root, validate_block)
        return corrections

"""Config schema registry for pipeline node kinds.

Maps every NodeKind to its configuration record and the declarative rules
that record must satisfy. The registry holds no mutable state.
"""

from typing import Any, Callable, Dict, List, Mapping, Union
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .exceptions import SchemaError, UnknownNodeKindError
from .schema import (
    CONFIG_MODELS,
    AggregateConfig,
    ConfigRecord,
    DataSourceConfig,
    FilterConfig,
    NodeConfig,
    NodeKind,
    OutputConfig,
    TransformConfig,
    ValidationError,
)


Rule = Callable[[Any], List[ValidationError]]


def _required(config: ConfigRecord, attr: str, label: str) -> List[ValidationError]:
    value = getattr(config, attr)
    if not value:
        return [ValidationError(field=_wire_name(config, attr), message=f"{label} is required")]
    return []


def _wire_name(config: ConfigRecord, attr: str) -> str:
    info = type(config).model_fields[attr]
    return info.alias or to_camel(attr)


def _validate_data_source(config: DataSourceConfig) -> List[ValidationError]:
    errors = _required(config, "connection_string", "Connection string")
    errors.extend(_required(config, "table_name", "Table name"))
    return errors


def _validate_transform(config: TransformConfig) -> List[ValidationError]:
    if config.script or config.mappings:
        return []
    return [ValidationError(
        field="script",
        message="Either a script or at least one field mapping is required",
    )]


def _validate_filter(config: FilterConfig) -> List[ValidationError]:
    incomplete = [
        str(index) for index, condition in enumerate(config.conditions)
        if condition.field == "" or condition.value == ""
    ]
    if not incomplete:
        return []
    return [ValidationError(
        field="conditions",
        message=f"Every condition needs a field and a value (incomplete: {', '.join(incomplete)})",
        details=tuple(incomplete),
    )]


def _validate_aggregate(config: AggregateConfig) -> List[ValidationError]:
    errors = []
    if not config.group_by:
        errors.append(ValidationError(
            field="groupBy", message="At least one group-by field is required"
        ))
    incomplete = [
        str(index) for index, aggregation in enumerate(config.aggregations)
        if aggregation.field == "" or aggregation.output_name == ""
    ]
    if incomplete:
        errors.append(ValidationError(
            field="aggregations",
            message=f"Every aggregation needs a field and an output name (incomplete: {', '.join(incomplete)})",
            details=tuple(incomplete),
        ))
    return errors


def _validate_output(config: OutputConfig) -> List[ValidationError]:
    return _required(config, "destination", "Destination")


_RULES: Dict[NodeKind, Rule] = {
    NodeKind.DATA_SOURCE: _validate_data_source,
    NodeKind.TRANSFORM: _validate_transform,
    NodeKind.FILTER: _validate_filter,
    NodeKind.AGGREGATE: _validate_aggregate,
    NodeKind.OUTPUT: _validate_output,
}


def require_kind(kind: Union[str, NodeKind]) -> NodeKind:
    """Resolve ``kind`` to a NodeKind.

    Raises:
        UnknownNodeKindError: If ``kind`` is not one of the five node kinds
    """
    resolved = NodeKind.parse(kind)
    if resolved is None:
        raise UnknownNodeKindError(f"Unknown node kind: {kind!r}")
    return resolved


def default_config(kind: Union[str, NodeKind]) -> NodeConfig:
    """Return a fresh default configuration record for ``kind``."""
    return CONFIG_MODELS[require_kind(kind)]()


def coerce_config(kind: Union[str, NodeKind], data: Union[ConfigRecord, Mapping[str, Any], None]) -> NodeConfig:
    """Convert ``data`` into the configuration record for ``kind``.

    Args:
        kind: The node kind the configuration belongs to
        data: A configuration record, a mapping using wire or attribute names,
              or None for the defaults

    Returns:
        The typed configuration record

    Raises:
        UnknownNodeKindError: If the kind is unknown
        SchemaError: If the data cannot be coerced into the record
    """
    model = CONFIG_MODELS[require_kind(kind)]
    if data is None:
        return model()
    if isinstance(data, ConfigRecord):
        if isinstance(data, model):
            return data
        raise SchemaError(
            f"{type(data).__name__} cannot configure a '{NodeKind.parse(kind).value}' node",
            [ValidationError(field="config", message="Configuration does not match node kind")],
        )
    if not isinstance(data, Mapping):
        raise SchemaError(
            "Configuration must be a mapping",
            [ValidationError(field="config", message="Configuration must be a mapping")],
        )
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as e:
        raise SchemaError(
            f"Configuration does not match the '{NodeKind.parse(kind).value}' schema",
            convert_pydantic_errors(e),
        ) from e


def convert_pydantic_errors(error: PydanticValidationError, default_field: str = "config") -> List[ValidationError]:
    """Translate a Pydantic error into one ValidationError per location."""
    errors = []
    for detail in error.errors():
        location = [str(part) for part in detail.get("loc", ())]
        errors.append(ValidationError(
            field=location[0] if location else default_field,
            message=detail.get("msg", "Invalid value"),
            details=tuple(location[1:]),
        ))
    return errors


def validate(kind: Union[str, NodeKind], config: Union[ConfigRecord, Mapping[str, Any], None]) -> List[ValidationError]:
    """Check a configuration against the rules declared for ``kind``.

    Unknown kinds have no rules and always validate. A mapping that cannot be
    coerced into the kind's record reports the coercion errors instead.

    Args:
        kind: The node kind
        config: The configuration record or raw mapping

    Returns:
        A list of validation errors, empty if the configuration is valid
    """
    resolved = NodeKind.parse(kind)
    if resolved is None:
        return []
    try:
        record = coerce_config(resolved, config)
    except SchemaError as e:
        return list(e.errors)
    return _RULES[resolved](record)

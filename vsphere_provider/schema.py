"""
Resource schema and resource data.

A resource is described by a dict of attribute name -> :class:`Attribute`.
Callbacks read desired values and write observed values through
:class:`ResourceData`, which layers values set during the current call over
the user's configuration and the previously recorded state.
"""

import copy
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel

from vsphere_provider.errors import SchemaValidationError


class AttributeType(str, Enum):
    STRING = "string"
    INT = "int"
    BOOL = "bool"
    LIST = "list"
    MAP = "map"


_ZERO_VALUES = {
    AttributeType.STRING: "",
    AttributeType.INT: 0,
    AttributeType.BOOL: False,
    AttributeType.LIST: [],
    AttributeType.MAP: {},
}


def _check_scalar(attr_type: AttributeType, value: Any) -> bool:
    if attr_type == AttributeType.STRING:
        return isinstance(value, str)
    if attr_type == AttributeType.INT:
        return isinstance(value, int) and not isinstance(value, bool)
    if attr_type == AttributeType.BOOL:
        return isinstance(value, bool)
    return False


class Attribute(BaseModel):
    """A single attribute of a resource schema."""
    type: AttributeType
    description: str = ""
    required: bool = False
    optional: bool = False
    computed: bool = False
    force_new: bool = False
    default: Any = None
    max_items: int = 0
    # AttributeType for lists/maps of scalars, or a nested schema dict
    elem: Any = None
    allowed_values: Optional[List[str]] = None
    int_range: Optional[Tuple[int, int]] = None

    @property
    def computed_only(self) -> bool:
        return self.computed and not (self.optional or self.required)

    def zero_value(self) -> Any:
        return copy.deepcopy(_ZERO_VALUES[self.type])

    def check(self, key: str, value: Any) -> List[str]:
        """Return the list of problems with ``value`` for this attribute."""
        if self.type in (AttributeType.STRING, AttributeType.INT, AttributeType.BOOL):
            if not _check_scalar(self.type, value):
                return [f"{key}: expected {self.type.value}, got {type(value).__name__}"]
            if self.allowed_values is not None and value not in self.allowed_values:
                return [f"{key}: expected one of {self.allowed_values}, got {value!r}"]
            if self.int_range is not None:
                low, high = self.int_range
                if not low <= value <= high:
                    return [f"{key}: expected to be in the range ({low} - {high}), got {value}"]
            return []

        if self.type == AttributeType.MAP:
            if not isinstance(value, dict):
                return [f"{key}: expected map, got {type(value).__name__}"]
            elem = self.elem or AttributeType.STRING
            return [
                f"{key}.{k}: expected {elem.value}"
                for k, v in value.items() if not _check_scalar(elem, v)
            ]

        if not isinstance(value, list):
            return [f"{key}: expected list, got {type(value).__name__}"]
        problems = []
        if self.max_items and len(value) > self.max_items:
            problems.append(f"{key}: attribute supports {self.max_items} item maximum, config has {len(value)} declared")
        for i, item in enumerate(value):
            if isinstance(self.elem, dict):
                if not isinstance(item, dict):
                    problems.append(f"{key}.{i}: expected object")
                    continue
                for sub_key, sub_value in item.items():
                    sub_attr = self.elem.get(sub_key)
                    if sub_attr is None:
                        problems.append(f"{key}.{i}.{sub_key}: unsupported argument")
                    else:
                        problems.extend(sub_attr.check(f"{key}.{i}.{sub_key}", sub_value))
            elif self.elem is not None and not _check_scalar(self.elem, item):
                problems.append(f"{key}.{i}: expected {self.elem.value}")
        return problems


Schema = Dict[str, Attribute]


def merge_schema(dst: Schema, src: Schema) -> None:
    """Copy every attribute of ``src`` into ``dst``.

    Attributes are deep-copied so per-resource tweaks made on ``dst``
    never show up in ``src``.
    """
    for key, attr in src.items():
        dst[key] = attr.model_copy(deep=True)


class ResourceData:
    """Read/write view over a resource's config and state for one callback."""

    def __init__(self, schema: Schema, config: Optional[Dict[str, Any]] = None,
                 state: Optional[Dict[str, Any]] = None):
        self._schema = schema
        self._config = dict(config) if config is not None else None
        self._state = dict(state or {})
        self._id = self._state.pop("id", "") or ""
        self._set: Dict[str, Any] = {}

    def _attr(self, key: str) -> Attribute:
        try:
            return self._schema[key]
        except KeyError:
            raise KeyError(f"{key!r} is not defined in the resource schema") from None

    def _lookup(self, key: str) -> Tuple[Any, bool]:
        attr = self._attr(key)
        if key in self._set:
            return self._set[key], self._set[key] is not None
        if self._config is not None and not attr.computed_only:
            value = self._config.get(key)
            if value is not None or not attr.computed:
                return value, value is not None
        value = self._state.get(key)
        return value, value is not None

    def id(self) -> str:
        return self._id

    def set_id(self, value: Optional[str]) -> None:
        """Set the resource id; an empty id marks the resource as gone."""
        self._id = value or ""

    def get(self, key: str) -> Any:
        value, exists = self._lookup(key)
        if not exists:
            return self._attr(key).zero_value()
        return copy.deepcopy(value)

    def get_ok(self, key: str) -> Tuple[Any, bool]:
        """Return (value, ok) where ok is False for unset and zero values."""
        value = self.get(key)
        return value, value != self._attr(key).zero_value()

    def get_ok_exists(self, key: str) -> Tuple[Any, bool]:
        """Return (value, exists); unlike get_ok, a set ``False``/``0`` counts."""
        value, exists = self._lookup(key)
        return copy.deepcopy(value), exists

    def set(self, key: str, value: Any) -> None:
        attr = self._attr(key)
        if value is not None:
            problems = attr.check(key, value)
            if problems:
                raise SchemaValidationError(problems)
        self._set[key] = copy.deepcopy(value)

    def state(self) -> Optional[Dict[str, Any]]:
        """Resulting state, or None when the resource no longer exists."""
        if not self._id:
            return None
        result: Dict[str, Any] = {"id": self._id}
        for key in self._schema:
            value, exists = self._lookup(key)
            if exists:
                result[key] = copy.deepcopy(value)
        return result


CrudFunc = Callable[[ResourceData, Any], None]


class Resource:
    """Schema plus lifecycle callbacks for one resource type."""

    def __init__(self, schema: Schema, create: CrudFunc, read: CrudFunc,
                 update: Optional[CrudFunc], delete: CrudFunc, description: str = ""):
        self.schema = schema
        self.create = create
        self.read = read
        self.update = update
        self.delete = delete
        self.description = description

    def validate_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Check ``config`` against the schema and fill in defaults.

        Returns:
            The normalised configuration

        Raises:
            SchemaValidationError: listing every problem found
        """
        problems: List[str] = []
        normalized: Dict[str, Any] = {}

        for key, value in (config or {}).items():
            attr = self.schema.get(key)
            if attr is None:
                problems.append(f"{key}: unsupported argument")
                continue
            if attr.computed_only:
                problems.append(f"{key}: computed attribute cannot be set")
                continue
            if value is None:
                continue
            problems.extend(attr.check(key, value))
            normalized[key] = copy.deepcopy(value)

        for key, attr in self.schema.items():
            if key in normalized:
                continue
            if attr.required:
                problems.append(f"{key}: required attribute is missing")
            elif attr.default is not None:
                normalized[key] = copy.deepcopy(attr.default)

        if problems:
            raise SchemaValidationError(problems)
        return normalized

    def data(self, config: Optional[Dict[str, Any]] = None,
             state: Optional[Dict[str, Any]] = None) -> ResourceData:
        return ResourceData(self.schema, config=config, state=state)

    def force_new_changes(self, state: Dict[str, Any], config: Dict[str, Any]) -> List[str]:
        """Names of force-new attributes whose value differs between state and config."""
        return sorted(
            key for key, attr in self.schema.items()
            if attr.force_new and state.get(key) != config.get(key)
        )

    def has_changes(self, state: Dict[str, Any], config: Dict[str, Any]) -> bool:
        """
        Whether any configurable attribute differs between state and config.

        An unset optional attribute equals its zero value, so ``standby_nics``
        read back as ``[]`` does not differ from a config that omits it.
        """
        for key, attr in self.schema.items():
            if attr.computed_only:
                continue
            new = config.get(key)
            if new is None and attr.computed:
                continue
            old = state.get(key)
            if new is None:
                new = attr.zero_value()
            if old is None:
                old = attr.zero_value()
            if old != new:
                return True
        return False

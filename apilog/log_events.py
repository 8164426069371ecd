# --------------------------------------------------
# log_events.py
# --------------------------------------------------
# In-memory model of one structured log event, the
# input of the log formatter.
#
#   ✔ LogEvent: level, UTC timestamp, message template,
#     named properties and optional exception text
#   ✔ PropertyValue union: scalar / sequence /
#     structure / dictionary, each able to render itself
#   ✔ capture_value(): any Python object → PropertyValue
#   ✔ LogEvent.from_record(): logging.LogRecord → LogEvent
#
# Properties of a LogRecord come from:
#   - a mapping passed as the single log argument
#   - positional arguments, named "0", "1", ...
#   - attributes added via extra=...
# --------------------------------------------------

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Set, Tuple

from .log_settings import level_name


class PropertyValue:
    """Base class of every value stored in LogEvent.properties."""

    def render(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class ScalarValue(PropertyValue):
    value: Any

    def render(self) -> str:
        v = self.value
        if v is None:
            return "null"
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, str):
            return '"' + v.replace('"', '\\"') + '"'
        if isinstance(v, (datetime, date)):
            return v.isoformat()
        if isinstance(v, int):
            return str(int(v))
        if isinstance(v, float):
            return repr(float(v))
        return str(v)


@dataclass(frozen=True)
class SequenceValue(PropertyValue):
    elements: Tuple[PropertyValue, ...]

    def render(self) -> str:
        return "[" + ", ".join(e.render() for e in self.elements) + "]"


@dataclass(frozen=True)
class StructureValue(PropertyValue):
    properties: Tuple[Tuple[str, PropertyValue], ...]
    type_tag: Optional[str] = None

    def render(self) -> str:
        body = ", ".join(f"{name}: {value.render()}" for name, value in self.properties)
        prefix = f"{self.type_tag} " if self.type_tag else ""
        return prefix + "{ " + body + " }"


@dataclass(frozen=True)
class DictionaryValue(PropertyValue):
    elements: Tuple[Tuple[ScalarValue, PropertyValue], ...]

    def render(self) -> str:
        return "[" + ", ".join(f"({k.render()}: {v.render()})" for k, v in self.elements) + "]"


_SCALAR_TYPES = (str, int, float, bool, datetime, date, type(None))

# Nesting limit for captured objects; deeper values are kept as text
MAX_CAPTURE_DEPTH = 10


def capture_value(obj: Any, max_depth: int = MAX_CAPTURE_DEPTH) -> PropertyValue:
    """
    Convert an arbitrary Python object into a self-describing PropertyValue.

    Already-captured values pass through unchanged. Objects with
    attributes (dataclasses, pydantic models, plain instances) become
    structures tagged with their class name. Containers nested deeper
    than `max_depth`, or already being captured (cycles), fall back to
    their str() text.
    """
    return _capture(obj, max_depth, set())


def _capture(obj: Any, depth: int, seen: Set[int]) -> PropertyValue:
    if isinstance(obj, PropertyValue):
        return obj

    if isinstance(obj, Enum):
        value = obj.value
        return ScalarValue(value if isinstance(value, _SCALAR_TYPES) else str(obj))

    if isinstance(obj, _SCALAR_TYPES):
        return ScalarValue(obj)

    if isinstance(obj, BaseException):
        return ScalarValue(f"{type(obj).__name__}: {obj}")

    if depth <= 0 or id(obj) in seen:
        return ScalarValue(str(obj))

    seen.add(id(obj))
    try:
        return _capture_container(obj, depth - 1, seen)
    finally:
        seen.discard(id(obj))


def _capture_container(obj: Any, depth: int, seen: Set[int]) -> PropertyValue:
    if isinstance(obj, Mapping):
        return DictionaryValue(tuple(
            (ScalarValue(k if isinstance(k, _SCALAR_TYPES) else str(k)), _capture(v, depth, seen))
            for k, v in obj.items()
        ))

    if isinstance(obj, (list, tuple, set, frozenset)):
        items = sorted(obj, key=repr) if isinstance(obj, (set, frozenset)) else obj
        return SequenceValue(tuple(_capture(v, depth, seen) for v in items))

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        fields = ((f.name, getattr(obj, f.name)) for f in dataclasses.fields(obj))
        return _structure(obj, fields, depth, seen)

    # pydantic v2 models
    if hasattr(obj, "model_dump") and callable(obj.model_dump):
        return _structure(obj, obj.model_dump().items(), depth, seen)

    if hasattr(obj, "__dict__") and not isinstance(obj, type):
        attrs = ((k, v) for k, v in vars(obj).items() if not k.startswith("_"))
        return _structure(obj, attrs, depth, seen)

    return ScalarValue(str(obj))


def _structure(obj, items, depth: int, seen: Set[int]) -> StructureValue:
    return StructureValue(
        tuple((name, _capture(value, depth, seen)) for name, value in items),
        type(obj).__name__,
    )


# Attribute names every LogRecord has; anything else came from extra=...
_DEFAULT_RECORD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


@dataclass(frozen=True)
class LogEvent:
    """One structured log record prior to formatting."""

    timestamp: datetime
    level: str
    message_template: str
    properties: Dict[str, PropertyValue] = field(default_factory=dict)
    exception: Optional[str] = None

    @classmethod
    def from_record(cls, record: logging.LogRecord, exception: Optional[str] = None) -> "LogEvent":
        """
        Build a LogEvent from a standard library LogRecord.

        The logger name becomes the SourceContext unless the record
        already carries one.
        """
        properties: Dict[str, PropertyValue] = {}

        args = record.args
        if isinstance(args, Mapping):
            for key, value in args.items():
                properties[str(key)] = capture_value(value)
        elif args:
            for index, value in enumerate(args):
                properties[str(index)] = capture_value(value)

        for key, value in record.__dict__.items():
            if key not in _DEFAULT_RECORD_ATTRS:
                properties[key] = capture_value(value)

        properties.setdefault("SourceContext", ScalarValue(record.name))

        return cls(
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
            level=level_name(record.levelno),
            message_template=str(record.msg),
            properties=properties,
            exception=exception if exception is not None else record.exc_text,
        )

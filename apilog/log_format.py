# --------------------------------------------------
# log_format.py
# --------------------------------------------------
# Renders log events into one fixed-shape JSON record.
#
# Record layout:
#   {
#       "Level":"Information",
#       "Time":{ "$date" : "2024-01-01T00:00:00.0000000Z" },
#       "TraceId":...,          <- LOG_PROPERTY_NAMES order
#       ...
#       "SourceContext":...
#   }
#
# Rules:
#   ✔ Every schema field is written, "" when missing
#   ✔ Field order never depends on the event's properties
#   ✔ Events not tagged with SOURCE_CONTEXT (uvicorn,
#     fastapi, any library logger) get all of their
#     properties folded into the Message field
#   ✔ No trailing newline: handlers add the separator
# --------------------------------------------------

import io
import json
import logging
import math
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, TextIO, Tuple

from .log_events import (
    DictionaryValue,
    LogEvent,
    PropertyValue,
    ScalarValue,
    SequenceValue,
    StructureValue,
)
from .log_settings import LOG_LEVEL_KEY, LOG_PROPERTY_NAMES, LOG_TIME_KEY, SOURCE_CONTEXT


def write_quoted_json_string(text: str, output: TextIO) -> None:
    output.write(json.dumps(text, ensure_ascii=False))


class JsonValueFormatter:
    """
    Writes PropertyValues as JSON.

    Structures carry their type tag under `type_tag_name`
    (first key) so nested objects stay self-describing.
    Pass type_tag_name=None to omit tags.
    """

    def __init__(self, type_tag_name: Optional[str] = "$type"):
        self.type_tag_name = type_tag_name

    def format(self, value: PropertyValue, output: TextIO) -> None:
        if isinstance(value, ScalarValue):
            self._write_scalar(value.value, output)
        elif isinstance(value, SequenceValue):
            output.write("[")
            for i, element in enumerate(value.elements):
                if i:
                    output.write(",")
                self.format(element, output)
            output.write("]")
        elif isinstance(value, StructureValue):
            output.write("{")
            delim = ""
            if self.type_tag_name and value.type_tag is not None:
                write_quoted_json_string(self.type_tag_name, output)
                output.write(":")
                write_quoted_json_string(value.type_tag, output)
                delim = ","
            for name, element in value.properties:
                output.write(delim)
                delim = ","
                write_quoted_json_string(name, output)
                output.write(":")
                self.format(element, output)
            output.write("}")
        elif isinstance(value, DictionaryValue):
            output.write("{")
            for i, (key, element) in enumerate(value.elements):
                if i:
                    output.write(",")
                k = key.value
                write_quoted_json_string(k if isinstance(k, str) else key.render(), output)
                output.write(":")
                self.format(element, output)
            output.write("}")
        else:
            raise TypeError(f"Unsupported property value: {type(value).__name__}")

    def _write_scalar(self, v, output: TextIO) -> None:
        if v is None:
            output.write("null")
        elif isinstance(v, bool):
            output.write("true" if v else "false")
        elif isinstance(v, int):
            output.write(str(int(v)))
        elif isinstance(v, float):
            v = float(v)
            if math.isnan(v) or math.isinf(v):
                write_quoted_json_string(str(v).replace("inf", "Infinity").replace("nan", "NaN"), output)
            else:
                output.write(repr(v))
        elif isinstance(v, (datetime, date)):
            write_quoted_json_string(v.isoformat(), output)
        elif isinstance(v, str):
            # json.dumps encodes the value of str subclasses (str enums)
            write_quoted_json_string(v, output)
        else:
            write_quoted_json_string(str(v), output)


# --------------------------------------------------
# Event formatting
# --------------------------------------------------

def format_timestamp(ts: datetime) -> str:
    """ISO-8601 UTC with 7 fractional digits, e.g. 2024-01-01T00:00:00.0000000Z"""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return f"{ts:%Y-%m-%dT%H:%M:%S}.{ts.microsecond:06d}0Z"


def format_event(log_event: LogEvent, output: TextIO, value_formatter: JsonValueFormatter) -> None:
    """
    Write one log event to `output` as a JSON object.

    Raises ValueError when any argument is None; nothing is
    written in that case.
    """
    if log_event is None:
        raise ValueError("log_event must not be None")
    if output is None:
        raise ValueError("output must not be None")
    if value_formatter is None:
        raise ValueError("value_formatter must not be None")

    output_properties = to_output_properties(log_event)

    output.write("{\n")
    output.write(f'\t"{LOG_LEVEL_KEY}":"{log_event.level}",\n')
    output.write(f'\t"{LOG_TIME_KEY}":{{ "$date" : "{format_timestamp(log_event.timestamp)}" }}')

    if output_properties:
        output.write(",\n")
        count = len(output_properties)
        for index, (key, value) in enumerate(output_properties, start=1):
            if key == "Message" and not source_from_api(log_event):
                value = ScalarValue(merge_message(log_event))
            write_json_property(key, value, index, count, output, value_formatter)
    else:
        output.write("\n")

    output.write("}")


def write_json_property(
    key: str,
    value: PropertyValue,
    now_index: int,
    count: int,
    output: TextIO,
    value_formatter: JsonValueFormatter,
) -> None:
    output.write("\t")
    write_quoted_json_string(key, output)
    output.write(":")
    value_formatter.format(value, output)

    if now_index < count:
        output.write(",")

    output.write("\n")


def source_from_api(log_event: LogEvent) -> bool:
    """True when the event was written through our own logging helpers."""
    source = log_event.properties.get("SourceContext")
    if source is None:
        return False
    return SOURCE_CONTEXT in source.render()


def merge_message(log_event: LogEvent) -> str:
    """
    Fold a foreign event into a single Message string:

        From "uvicorn.error": [[MessageTemplate,"..."],[key,value],...,[Exception,"..."]]
    """
    source = log_event.properties.get("SourceContext", ScalarValue(""))

    segments = [f'[MessageTemplate,"{log_event.message_template}"]']
    segments.extend(f"[{key},{value.render()}]" for key, value in log_event.properties.items())
    if log_event.exception:
        segments.append(f'[Exception,"{log_event.exception}"]')

    return f"From {source.render()}: [" + ",".join(segments) + "]"


def to_output_properties(log_event: LogEvent) -> List[Tuple[str, PropertyValue]]:
    """
    Reconcile the event's properties against LOG_PROPERTY_NAMES.

    Returns an empty list for events without properties.
    """
    properties: Dict[str, PropertyValue] = log_event.properties
    if not properties:
        return []
    return [(name, properties.get(name, ScalarValue(""))) for name in LOG_PROPERTY_NAMES]


# --------------------------------------------------
# logging integration
# --------------------------------------------------

class LogFormat(logging.Formatter):
    """
    logging.Formatter producing one schema-shaped JSON record per LogRecord.

    The handler's terminator ("\\n") separates consecutive records.
    """

    def __init__(self, value_formatter: Optional[JsonValueFormatter] = None):
        super().__init__()
        self.value_formatter = value_formatter or JsonValueFormatter("$type")

    def format(self, record: logging.LogRecord) -> str:
        exception = None
        if record.exc_info:
            exception = self.formatException(record.exc_info)

        buffer = io.StringIO()
        format_event(LogEvent.from_record(record, exception), buffer, self.value_formatter)
        return buffer.getvalue()

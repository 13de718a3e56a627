import json
from dataclasses import is_dataclass, asdict
from enum import Enum
from typing import Any

from .job import JobInfo


class DataclassJSONEncoder(json.JSONEncoder):
    """
    A JSON encoder for the client's record types.

    Supported types:
    - All standard JSON types (dict, list, str, int, float, bool, None)
    - JobInfo (fields plus the classified state name)
    - Other dataclasses (converted via asdict)
    - Enum (uses value)
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, JobInfo):
            data = asdict(obj)
            data['state'] = obj.state.name
            return data

        # Handle dataclasses
        if is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)

        # Handle Enum
        elif isinstance(obj, Enum):
            return obj.value

        # Fall back to the parent class default method
        # This will raise TypeError for non-serializable objects
        return super().default(obj)


def dumps(obj: Any, **kwargs) -> str:
    """
    Serialize obj to a JSON formatted string using DataclassJSONEncoder.

    Args:
        obj: The object to serialize
        **kwargs: Additional arguments passed to json.dumps

    Returns:
        JSON string representation
    """
    kwargs.setdefault('cls', DataclassJSONEncoder)
    return json.dumps(obj, **kwargs)


def dump(obj: Any, fp, **kwargs) -> None:
    """
    Serialize obj as a JSON formatted stream to fp using DataclassJSONEncoder.

    Args:
        obj: The object to serialize
        fp: File-like object to write to
        **kwargs: Additional arguments passed to json.dump
    """
    kwargs.setdefault('cls', DataclassJSONEncoder)
    json.dump(obj, fp, **kwargs)

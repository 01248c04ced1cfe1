from dataclasses import dataclass
from typing import Any, Union

from src.routing.domain.errors import MalformedInput


@dataclass(frozen=True)
class Scalar:
    value: str


@dataclass(frozen=True)
class SlugList:
    values: tuple[str, ...]


ConfigValue = Union[Scalar, SlugList]


def parse_config_value(raw: Any) -> ConfigValue:
    """Tag a raw stored option. Older installs stored a bare string, newer ones a list."""
    if raw is None:
        return SlugList(())
    if isinstance(raw, str):
        return Scalar(raw)
    if isinstance(raw, (list, tuple)):
        return SlugList(tuple(str(item) for item in raw if isinstance(item, (str, int)) and not isinstance(item, bool)))
    if isinstance(raw, dict):
        # PHP-style serialized arrays come back keyed by index
        return SlugList(tuple(str(item) for item in raw.values() if isinstance(item, str)))
    raise MalformedInput(f"Unsupported option shape: {type(raw).__name__}")


def config_value_to_list(value: ConfigValue) -> list[str]:
    if isinstance(value, Scalar):
        items: tuple[str, ...] = (value.value,)
    else:
        items = value.values
    return [item.strip() for item in items if item and item.strip()]


def normalize_option(raw: Any) -> list[str]:
    return config_value_to_list(parse_config_value(raw))

"""
ConfigValue - значения, допустимые в headers/params/form/json.

Закрытое множество вариантов:
    None | bool | int | float | str | файл | List[ConfigValue] | Dict[str, ConfigValue]

Любое другое значение отклоняется при нормализации (TypeError), поэтому
потребители (кодирование заголовков, query, form, json) работают только
с известными вариантами.
"""

import io
from typing import Any, Dict, IO, List, Mapping, Optional, Set, Union

ConfigValue = Union[None, bool, int, float, str, IO, List[Any], Dict[str, Any]]

# Вариант для параметров/форм верхнего уровня
ConfigMap = Dict[str, ConfigValue]


def is_file(value: Any) -> bool:
    """Файловый дескриптор: открытый поток с методом read()."""
    if isinstance(value, io.IOBase):
        return True
    return hasattr(value, "read") and callable(value.read) and not isinstance(value, (str, bytes))


def normalize_value(value: Any, _seen: Optional[Set[int]] = None) -> ConfigValue:
    """
    Привести значение к ConfigValue.

    Tuples становятся списками, ключи словарей - строками. Циклические
    ссылки отклоняются.

    Args:
        value: Произвольное значение

    Returns:
        Нормализованная копия значения

    Raises:
        TypeError: Значение не является ни одним из вариантов ConfigValue
        ValueError: Обнаружена циклическая ссылка

    Examples:
        >>> normalize_value({"ids": (1, 2)})
        {'ids': [1, 2]}
        >>> normalize_value({1: "one"})
        {'1': 'one'}
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    if isinstance(value, bytes):
        return value.decode("utf-8")

    if is_file(value):
        return value

    if isinstance(value, (list, tuple, Mapping)):
        seen = _seen if _seen is not None else set()
        marker = id(value)
        if marker in seen:
            raise ValueError("Cyclic reference in option value")
        seen.add(marker)
        try:
            if isinstance(value, Mapping):
                return {str(k): normalize_value(v, seen) for k, v in value.items()}
            return [normalize_value(v, seen) for v in value]
        finally:
            seen.discard(marker)

    raise TypeError(
        f"Unsupported option value type: {type(value).__name__}"
    )


def normalize_map(data: Optional[Mapping[Any, Any]]) -> ConfigMap:
    """Нормализовать словарь опций (params/form/json). None -> {}."""
    if not data:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"Expected a mapping, got {type(data).__name__}")
    return {str(k): normalize_value(v) for k, v in data.items()}


def to_param_string(value: ConfigValue) -> str:
    """
    Строковое представление скаляра для query/form/заголовков.

    Examples:
        >>> to_param_string(True)
        'true'
        >>> to_param_string(None)
        ''
        >>> to_param_string(1.5)
        '1.5'
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, str)):
        return str(value)
    if is_file(value):
        return getattr(value, "name", "") or ""
    raise TypeError(f"Cannot convert {type(value).__name__} to a parameter string")


def flatten_params(data: Mapping[str, ConfigValue], prefix: str = "") -> List[tuple]:
    """
    Развернуть вложенный словарь в список пар (key, value).

    Списки дают повторяющиеся ключи, вложенные словари - нотацию key[sub].
    Значения-файлы сохраняются как есть (для multipart).

    Examples:
        >>> flatten_params({"q": "halite", "tags": ["a", "b"], "user": {"id": 1}})
        [('q', 'halite'), ('tags', 'a'), ('tags', 'b'), ('user[id]', 1)]
    """
    pairs: List[tuple] = []
    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix else key
        if isinstance(value, dict):
            pairs.extend(flatten_params(value, name))
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, dict):
                    pairs.extend(flatten_params(item, name))
                else:
                    pairs.append((name, item))
        else:
            pairs.append((name, value))
    return pairs


def contains_file(data: Mapping[str, ConfigValue]) -> bool:
    """Есть ли среди значений (включая вложенные) файловый дескриптор."""
    return any(is_file(value) for _, value in flatten_params(data))

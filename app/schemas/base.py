from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict


class _CompatModel(BaseModel):
    """Base model that ignores unknown fields sent by the browser form."""

    model_config = ConfigDict(extra="ignore")


def _rename_keys(values: Any, aliases: Mapping[str, str]) -> Any:
    """Map browser-side camelCase keys onto snake_case field names.

    Keys already given in snake_case win over their camelCase twin.
    """

    if not isinstance(values, dict):
        return values

    renamed = dict(values)
    for alias, name in aliases.items():
        if alias in renamed:
            value = renamed.pop(alias)
            renamed.setdefault(name, value)
    return renamed

from __future__ import annotations

import fnmatch
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .constants import DEFAULT_MAX_NAME_LENGTH
from .runtime import op_tool_name, operation_tags, sanitize_tool_name

__all__ = ["ExtractionOptions", "ToolNameFn"]

# (method, path, operation) -> base tool name
ToolNameFn = Callable[[str, str, Dict[str, Any]], str]


def _upper(values: Optional[List[str]]) -> Optional[set[str]]:
    return {v.upper() for v in values} if values is not None else None


@dataclass
class ExtractionOptions:
    """Filtering and naming options for an extraction run.

    All filters are optional; with defaults every operation is extracted.

    Example:
        >>> options = ExtractionOptions(
        ...     tool_prefix="github",
        ...     include_paths=["/repos/*"],
        ...     exclude_tags=["deprecated"],
        ... )
    """

    tool_prefix: Optional[str] = None
    tool_name_fn: Optional[ToolNameFn] = None
    include_paths: Optional[List[str]] = None
    exclude_paths: Optional[List[str]] = None
    include_methods: Optional[List[str]] = None
    exclude_methods: Optional[List[str]] = None
    include_tags: Optional[List[str]] = None
    exclude_tags: Optional[List[str]] = None
    include_operations: Optional[List[str]] = None
    exclude_operations: Optional[List[str]] = None
    max_name_length: int = DEFAULT_MAX_NAME_LENGTH
    # Unknown parameter locations abort the run instead of skipping the operation.
    strict: bool = False

    def should_include_operation(self, path: str, method: str, operation: Dict[str, Any]) -> bool:
        """True when the operation passes every configured filter.

        Raises :class:`SchemaShapeError` when ``tags`` is not a list of strings.
        """
        method = method.upper()
        include_methods = _upper(self.include_methods)
        if include_methods is not None and method not in include_methods:
            return False
        exclude_methods = _upper(self.exclude_methods)
        if exclude_methods is not None and method in exclude_methods:
            return False

        if self.include_paths is not None and not any(
            fnmatch.fnmatchcase(path, pat) for pat in self.include_paths
        ):
            return False
        if self.exclude_paths and any(fnmatch.fnmatchcase(path, pat) for pat in self.exclude_paths):
            return False

        tags = set(operation_tags(operation))
        if self.include_tags is not None and not tags & set(self.include_tags):
            return False
        if self.exclude_tags and tags & set(self.exclude_tags):
            return False

        op_id = operation.get("operationId")
        if self.include_operations is not None and op_id not in self.include_operations:
            return False
        if self.exclude_operations and op_id in self.exclude_operations:
            return False
        return True

    def get_tool_name(
        self,
        operation_id: Optional[str],
        method: str,
        path: str,
        operation: Dict[str, Any],
    ) -> str:
        """Base tool name before uniqueness is enforced.

        ``tool_name_fn`` replaces the default naming; ``tool_prefix`` is
        applied after either.
        """
        if self.tool_name_fn is not None:
            name = sanitize_tool_name(self.tool_name_fn(method, path, operation), self.max_name_length)
        else:
            name = op_tool_name(path, method, operation_id, self.max_name_length)
        if self.tool_prefix:
            name = sanitize_tool_name(f"{self.tool_prefix}_{name}", self.max_name_length)
        return name

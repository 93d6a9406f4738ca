from . import paths
from . import tags
from . import shape
from . import generate
from . import flattener
from . import merge
from . import table
from . import convert

from .config import Settings, load_settings
from .errors import (
    AbsentValueError,
    AnnotationError,
    CycleError,
    EmptyShapeError,
    ShapeError,
    StarstructError,
    TableError,
    UnsupportedKindError,
)
from .flattener import flatten, flatten_fields, render_leaf
from .generate import generate_shape, generate_shape_for_type
from .merge import merge_field_lists, merge_fields
from .table import from_rows, reconcile_headers, to_rows, to_table
from .convert import pretty_json, query_params, query_string, to_map

__all__ = [
    "paths",
    "tags",
    "shape",
    "generate",
    "flattener",
    "merge",
    "table",
    "convert",
    "Settings",
    "load_settings",
    "StarstructError",
    "ShapeError",
    "AbsentValueError",
    "EmptyShapeError",
    "UnsupportedKindError",
    "CycleError",
    "AnnotationError",
    "TableError",
    "generate_shape",
    "generate_shape_for_type",
    "flatten",
    "flatten_fields",
    "render_leaf",
    "merge_fields",
    "merge_field_lists",
    "to_rows",
    "from_rows",
    "reconcile_headers",
    "to_table",
    "to_map",
    "query_params",
    "query_string",
    "pretty_json",
]
